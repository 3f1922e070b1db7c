from .errors import EngineError
from .service import Quote, RetirementEngine, build_engine

__all__ = ["EngineError", "Quote", "RetirementEngine", "build_engine"]
