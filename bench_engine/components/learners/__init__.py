from .base import Learner, LearnerModel
from .debug import LearnerClassifDebug
from .featureless import LearnerClassifFeatureless, LearnerRegrFeatureless
from .params import ParamDbl, ParamFct, ParamInt, ParamLgl, ParamSet, ParamUty
from .sklearn_glue import SklearnLearner

__all__ = [
    "Learner",
    "LearnerModel",
    "LearnerClassifDebug",
    "LearnerClassifFeatureless",
    "LearnerRegrFeatureless",
    "SklearnLearner",
    "ParamSet",
    "ParamDbl",
    "ParamInt",
    "ParamFct",
    "ParamLgl",
    "ParamUty",
]
