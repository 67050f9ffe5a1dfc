"""Name → strategy class registry; chains in configuration refer to these names."""
from typing import Callable, Dict, List, Optional, Type

_strategies: Dict[str, Type] = {}


def register(name: str) -> Callable[[Type], Type]:
    def decorator(cls: Type) -> Type:
        cls.name = name
        _strategies[name] = cls
        return cls
    return decorator


def get_strategy_class(name: str) -> Optional[Type]:
    return _strategies.get(name)


def registered_names() -> List[str]:
    return sorted(_strategies)
