from time import time
import logging
import numpy as np

from treebin import ContinuousSplit, TreePointEncoder


logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
)

np.set_printoptions(precision=2)

random_state = 42
n_samples = 1_000_000
n_continuous = 8
arities = [3, 12]
max_bins = 64

rng = np.random.default_rng(random_state)

X = np.concatenate(
    (
        rng.normal(size=(n_samples, n_continuous)),
        np.stack([rng.integers(arity, size=n_samples) for arity in arities], axis=1),
    ),
    axis=1,
)
y = rng.normal(size=n_samples)
feature_arity = [0] * n_continuous + arities

# The splits would come from the quantiles sketch of the training run
quantiles = np.linspace(0, 1, max_bins + 1)[1:-1]
splits = [
    [
        ContinuousSplit(col_idx, threshold)
        for threshold in np.unique(np.quantile(X[:, col_idx], quantiles))
    ]
    for col_idx in range(n_continuous)
] + [[] for _ in arities]

logging.info("JIT compiling...")
tic = time()
encoder = TreePointEncoder(feature_arity=feature_arity, n_jobs=-1)
encoder.fit(X, splits=splits)
encoder.transform(X[:10])
toc = time()
logging.info("Spent {time} compiling.".format(time=toc - tic))

tic = time()
X_binned = encoder.transform(X, y)
toc = time()
logging.info(f"transform took {toc - tic} on {n_samples} samples.")

print(encoder.threshold_table_)
print(X_binned[:5])
print(X_binned.dtype)

points = encoder.convert(zip(y[:1000], X[:1000]))
print(points[:3])
