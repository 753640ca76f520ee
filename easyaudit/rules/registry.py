"""Static registry of every rule processor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence

from . import Processor
from .advanced_block_vs_viewmodel import AdvancedBlockVsViewModelProcessor
from .around_plugins import AroundPluginsProcessor
from .block_viewmodel_ratio import BlockViewModelRatioProcessor
from .cacheable import CacheableProcessor
from .collection_in_loop import CollectionInLoopProcessor
from .count_on_collection import CountOnCollectionProcessor
from .di_area_scope import DiAreaScopeProcessor
from .escaper import DeprecatedEscaperProcessor
from .framework_plugins import MagentoFrameworkPluginProcessor
from .hard_written_sql import HardWrittenSqlProcessor
from .helpers import HelpersProcessor
from .no_proxy_in_commands import NoProxyInCommandsProcessor
from .object_manager import ObjectManagerProcessor
from .payment_abstract_method import PaymentAbstractMethodProcessor
from .preferences import DuplicatePreferencesProcessor
from .proxy_for_heavy_classes import ProxyForHeavyClassesProcessor
from .registry_usage import RegistryUsageProcessor
from .same_module_plugins import SameModulePluginsProcessor
from .specific_class_injection import SpecificClassInjectionProcessor
from .unused_modules import UnusedModulesProcessor

logger = logging.getLogger(__name__)

ProcessorFactory = Callable[[], Processor]

PROCESSORS: Sequence[ProcessorFactory] = (
    AdvancedBlockVsViewModelProcessor,
    AroundPluginsProcessor,
    BlockViewModelRatioProcessor,
    CacheableProcessor,
    CollectionInLoopProcessor,
    CountOnCollectionProcessor,
    DiAreaScopeProcessor,
    DeprecatedEscaperProcessor,
    MagentoFrameworkPluginProcessor,
    HardWrittenSqlProcessor,
    HelpersProcessor,
    NoProxyInCommandsProcessor,
    ObjectManagerProcessor,
    PaymentAbstractMethodProcessor,
    DuplicatePreferencesProcessor,
    ProxyForHeavyClassesProcessor,
    RegistryUsageProcessor,
    SameModulePluginsProcessor,
    SpecificClassInjectionProcessor,
    UnusedModulesProcessor,
)


@dataclass(frozen=True)
class RegistryDiagnostic:
    processor: str
    error: str


@dataclass
class ProcessorRegistry:
    """Instantiated processors in execution order plus construction failures."""

    processors: List[Processor] = field(default_factory=list)
    diagnostics: List[RegistryDiagnostic] = field(default_factory=list)

    @property
    def identifiers(self) -> List[str]:
        return [processor.identifier for processor in self.processors]


def build_registry(factories: Iterable[ProcessorFactory] = PROCESSORS) -> ProcessorRegistry:
    """Instantiate every factory, ordering processors lexicographically by identifier.

    A factory that raises is recorded as a diagnostic and left out.
    """

    registry = ProcessorRegistry()
    for factory in factories:
        name = getattr(factory, "__name__", repr(factory))
        try:
            processor = factory()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Processor %s unavailable: %s", name, exc)
            registry.diagnostics.append(RegistryDiagnostic(processor=name, error=str(exc)))
            continue
        registry.processors.append(processor)
    registry.processors.sort(key=lambda processor: processor.identifier)
    return registry
