"""Builds the conversion service and its per-category strategy chains from configuration."""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from flask import current_app

from document_pdf_gallery.config import Config
from document_pdf_gallery.services.conversion import strategies  # noqa: F401  (registers strategies)
from document_pdf_gallery.services.conversion.impl_default import DefaultConversionService
from document_pdf_gallery.services.conversion.registry import get_strategy_class, registered_names
from document_pdf_gallery.services.conversion.strategies import StrategySettings

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'conversion_service'


def _config_dict(config) -> Mapping:
    if config is None:
        return {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
    return config


def order_methods(names: Sequence[str], preferred: Optional[str] = None) -> List[str]:
    """Move ``preferred`` to the front when the chain contains it."""
    ordered = list(names)
    if preferred and preferred in ordered:
        ordered.remove(preferred)
        ordered.insert(0, preferred)
    return ordered


def build_chains(config=None) -> Dict[str, list]:
    config = _config_dict(config)
    settings = StrategySettings.from_config(config)
    preferred = config.get('PREFERRED_CONVERSION_METHOD')

    chains = {}
    for category, names in config.get('CONVERSION_CHAINS', {}).items():
        chain = []
        for name in order_methods(names, preferred):
            strategy_cls = get_strategy_class(name)
            if strategy_cls is None:
                raise ValueError(f"Unknown conversion method '{name}' configured for {category} "
                                 f"(known: {', '.join(registered_names())})")
            if category not in strategy_cls.categories:
                raise ValueError(f"Conversion method '{name}' does not handle {category} documents")
            chain.append(strategy_cls(settings))
        chains[category] = chain
    return chains


def build_conversion_service(config=None, storage=None) -> DefaultConversionService:
    """Factory for the conversion façade; ``storage`` enables convert_to_pdf()."""
    config = _config_dict(config)
    return DefaultConversionService(build_chains(config), storage=storage,
                                    pdfs_dir=config.get('PDFS_DIR', 'files/pdfs'))


def init_conversion_service(app) -> None:
    from document_pdf_gallery.services.storage import get_storage_for
    service = build_conversion_service(app.config, storage=get_storage_for(app))
    app.extensions[EXTENSION_KEY] = service
    app.logger.info("Conversion chains: %s", {c: [s.name for s in chain] for c, chain in service.chains.items()})


def get_conversion_service() -> DefaultConversionService:
    return current_app.extensions[EXTENSION_KEY]
