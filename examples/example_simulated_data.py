import numpy as np
from sklearn.linear_model import LinearRegression

from xysim import ColumnType, Task, setup_logging, simulate, transform


setup_logging()

sim = simulate(n=1000,
               numvars=(2, 2),
               catvars=(1, 3),
               noisevars=5,
               nlfun=np.square,
               interactions=2,
               stn=4,
               task=Task.regression(),
               random_state=1337)

print(sim.data.head())
print(sim.equation)
print(sim.psi.round(2))

# a linear model on the observed data misses the nonlinear part of the target
X = sim.data.drop(columns=["y", "(Intercept)"])
naive = LinearRegression().fit(X, sim.data["y"])
print(f"R2 on observed data:    {naive.score(X, sim.data['y']):.3f}")

# with the true transformation applied, the process is linear again
effects = transform(sim)
X_true = effects[sim.columns_of(ColumnType.linear, ColumnType.nonlinear, ColumnType.dummy)]
oracle = LinearRegression().fit(X_true, sim.data["y"])
print(f"R2 on true effects:     {oracle.score(X_true, sim.data['y']):.3f}")
