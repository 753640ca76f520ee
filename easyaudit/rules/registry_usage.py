"""Constructor injection of the deprecated ``Magento\\Framework\\Registry``."""

from __future__ import annotations

from easyaudit.severity import Severity
from easyaudit.utils import classes
from easyaudit.utils.content import get_line_number
from easyaudit.utils.fileio import read_text_file

from . import BaseProcessor, RuleSpec, ScanContext

REGISTRY_CLASS = "Magento\\Framework\\Registry"


class RegistryUsageProcessor(BaseProcessor):
    identifier = "use_of_registry"
    file_type = "php"
    rules = (
        RuleSpec(
            rule_id="magento.code.use-of-registry",
            name="Use of Registry",
            short_description="Magento\\Framework\\Registry is deprecated",
            long_description=(
                "The Registry pattern is deprecated in Magento 2. It bypasses dependency injection, "
                "creates hidden dependencies, makes code harder to test, and can lead to unexpected "
                "state mutations. Use constructor injection for explicit dependencies or data "
                "persistors for session-like storage instead."
            ),
            severity=Severity.ERROR,
        ),
    )

    def process(self, context: ScanContext) -> None:
        for file in context.files_of("php"):
            content = read_text_file(file)
            if "__construct" not in content:
                continue
            parameter_types = classes.get_constructor_parameter_types(content)
            if not parameter_types:
                continue
            class_name = classes.extract_class_name(content) or "UnknownClass"
            for param_name, param_class in parameter_types.items():
                if param_class != REGISTRY_CLASS:
                    continue
                self._add(
                    "magento.code.use-of-registry",
                    file,
                    get_line_number(content, param_name),
                    f'Class "{class_name}" uses deprecated Magento\\Framework\\Registry in constructor '
                    f'parameter "{param_name}". Use dependency injection or data persistors instead.',
                )
