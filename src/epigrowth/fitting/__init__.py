from .least_squares import FitResult, fit_model, default_max_iter, asymptotic_covariance
from .goodness import GoodnessOfFit, goodness_of_fit, rmse, residuals
