from .simulate import SimulationResult, run_simulation, simulate, transform
