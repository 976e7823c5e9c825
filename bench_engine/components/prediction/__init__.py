from .records import Prediction, PredictionClassif, PredictionRegr, combine_predictions

__all__ = ["Prediction", "PredictionClassif", "PredictionRegr", "combine_predictions"]
