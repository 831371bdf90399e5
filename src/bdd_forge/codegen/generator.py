from typing import Any, Dict, List, Optional, Union

from ..core import (
    BDDForgeError,
    ConfigurableModule,
    ModuleInfo,
    ModuleResult,
)
from ..gherkin.models import Feature, ParsedDocument, Scenario, Step, ValidationResult
from ..gherkin.parser import GherkinParser
from .config import DEFAULT_PACKAGE, PACKAGE_PATTERN, GenerationConfig
from .naming import (
    capture_types,
    class_name_for,
    java_comment,
    java_string,
    parameter_name,
    step_method_name,
    step_pattern,
    test_method_name,
)
from .templates import (
    DATA_TABLE_IMPORT,
    DEFAULT_IMPORTS,
    PARAMETERIZED_IMPORTS,
    SPRING_BOOT_IMPORTS,
    STATIC_IMPORTS,
    STEP_DEFINITION_IMPORTS,
    TEMPLATE_PRESETS,
    TemplateEngine,
    annotation_fields,
    annotation_imports,
    has_annotation,
    unique,
)
from .validator import validate_generated

MODES = ("inline", "steps")


class CodeGenerator(ConfigurableModule):
    """
    Generates JUnit 5 / Spring Boot test classes from parsed feature files.

    Two renderings are available from the same document: ``generate`` emits
    one test method per scenario plus shared step stubs, and
    ``generate_step_definitions`` emits Cucumber step-definition handlers.

    Example:
        generator = CodeGenerator()
        document = GherkinParser().parse(text)
        source = generator.generate(document, {"package_name": "com.example.test"})
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.template_engine = TemplateEngine()
        self.parser = GherkinParser()
        super().__init__(config)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "default_package": DEFAULT_PACKAGE,
            "template": None,
            "spring_boot_annotations": [],
            "custom_imports": [],
        }

    def validate(self) -> bool:
        """Validate module configuration"""
        template = self.config.get("template")
        if template and template not in TEMPLATE_PRESETS:
            self.logger.error(f"Invalid template: {template}")
            return False

        if not PACKAGE_PATTERN.match(self.config.get("default_package") or ""):
            self.logger.error(f"Invalid default package: {self.config.get('default_package')}")
            return False

        return True

    def get_info(self) -> ModuleInfo:
        """Get module information"""
        return ModuleInfo(
            name="Code Generator",
            version="0.1.0",
            description="Generates JUnit and Cucumber test source from feature files",
            author="BDD Forge Contributors",
            dependencies=["jinja2"],
            optional_dependencies=[],
        )

    def execute(self, input_data: Any) -> ModuleResult:
        """Execute code generation for a feature text or parsed document"""
        if not isinstance(input_data, dict) or "feature" not in input_data:
            return ModuleResult(
                success=False,
                data=None,
                error="Input must be a dict with 'feature' and optional 'config' and 'mode'",
            )

        mode = input_data.get("mode", "inline")
        if mode not in MODES:
            return ModuleResult(success=False, data=None, error=f"Unsupported mode: {mode}")

        try:
            document = input_data["feature"]
            if isinstance(document, str):
                document = self.parser.parse(document)

            # Step definitions carry no test methods, so only test classes are checked
            if mode == "steps":
                source = self.generate_step_definitions(document, input_data.get("config"))
                validation = ValidationResult()
            else:
                source = self.generate(document, input_data.get("config"))
                validation = self.validate_generated(source)

            return ModuleResult(
                success=True,
                data=source,
                metadata={
                    "mode": mode,
                    "feature": self._feature_of(document).name,
                    "validation": validation.to_dict(),
                },
            )
        except BDDForgeError as e:
            self.logger.error(f"Code generation failed: {e}")
            return ModuleResult(success=False, data=None, error=str(e))

    def generate(self, document: Union[ParsedDocument, Feature], config: Any = None) -> str:
        """
        Generate a JUnit 5 test class with one test method per scenario.

        Args:
            document: Parsed feature document
            config: GenerationConfig or dict of its fields

        Returns:
            Java source text

        Raises:
            InvalidConfig: If the package or class name is malformed
        """
        config = self._resolve_config(config)
        feature = self._feature_of(document)
        class_name = config.class_name or class_name_for(feature.name)

        stubs = self._collect_stubs(feature)
        annotations = self._class_annotations(config)
        has_outline = any(self._is_parameterized(scenario) for scenario in feature.scenarios)

        imports = list(DEFAULT_IMPORTS) + SPRING_BOOT_IMPORTS
        if has_outline:
            imports += PARAMETERIZED_IMPORTS
        imports += annotation_imports(annotations) + STATIC_IMPORTS + list(config.custom_imports)

        setup_calls = []
        if feature.background:
            setup_calls = [self._step_call(step, stubs) for step in feature.background.steps]

        source = self.template_engine.render_test_class({
            "package_name": config.package_name,
            "imports": unique(imports),
            "class_annotations": annotations,
            "class_name": class_name,
            "fields": annotation_fields(annotations),
            "feature_name": java_comment(feature.name),
            "setup_calls": setup_calls,
            "tests": self._test_methods(feature, stubs),
            "stubs": [self._stub(name, step) for name, step in stubs.items()],
        })

        self.logger.info(
            f"Generated {class_name} with {len(feature.scenarios)} tests and {len(stubs)} step stubs"
        )
        return source

    def generate_step_definitions(self, document: Union[ParsedDocument, Feature], config: Any = None) -> str:
        """
        Generate a Cucumber step-definition class with one handler per unique step.

        And/But steps are annotated as Given.
        """
        config = self._resolve_config(config)
        feature = self._feature_of(document)
        class_name = config.class_name or self._step_definitions_class_name(feature.name)

        stubs = self._collect_stubs(feature)
        annotations = self._class_annotations(config, extras=False)

        imports = list(STEP_DEFINITION_IMPORTS)
        if any(step.data_table for step in stubs.values()):
            imports.append(DATA_TABLE_IMPORT)
        imports += annotation_imports(annotations) + list(config.custom_imports)

        source = self.template_engine.render_step_definitions({
            "package_name": config.package_name,
            "imports": unique(imports),
            "class_annotations": annotations,
            "class_name": class_name,
            "definitions": [self._step_definition(name, step) for name, step in stubs.items()],
        })

        self.logger.info(f"Generated {class_name} with {len(stubs)} step definitions")
        return source

    def validate_generated(self, source: str) -> ValidationResult:
        """Run the shallow structural checks on generated source"""
        return validate_generated(source)

    def _resolve_config(self, config: Any) -> GenerationConfig:
        if isinstance(config, GenerationConfig):
            resolved = GenerationConfig(
                package_name=config.package_name,
                class_name=config.class_name,
                spring_boot_annotations=list(config.spring_boot_annotations),
                custom_imports=list(config.custom_imports),
                template=config.template,
            )
        else:
            data = dict(config or {})
            defaults = {
                "spring_boot_annotations": self.config.get("spring_boot_annotations") or [],
                "custom_imports": self.config.get("custom_imports") or [],
                "template": self.config.get("template"),
            }
            resolved = GenerationConfig.from_dict({**defaults, **data})

        if not resolved.package_name:
            resolved.package_name = self.config.get("default_package", DEFAULT_PACKAGE)

        resolved.validate(known_templates=TEMPLATE_PRESETS)
        return resolved

    @staticmethod
    def _feature_of(document: Union[ParsedDocument, Feature]) -> Feature:
        return document.feature if isinstance(document, ParsedDocument) else document

    @staticmethod
    def _step_definitions_class_name(feature_name: str) -> str:
        base = class_name_for(feature_name)
        return base[:-len("Test")] + "StepDefinitions"

    @staticmethod
    def _collect_stubs(feature: Feature) -> Dict[str, Step]:
        """First step seen for every derived method name, in file order"""
        stubs: Dict[str, Step] = {}
        for step in feature.all_steps():
            stubs.setdefault(step_method_name(step.keyword, step.text), step)
        return stubs

    @staticmethod
    def _class_annotations(config: GenerationConfig, extras: bool = True) -> List[str]:
        if config.spring_boot_annotations:
            annotations = list(config.spring_boot_annotations)
        elif config.template:
            annotations = list(TEMPLATE_PRESETS[config.template])
        else:
            annotations = ["@SpringBootTest"]

        if extras:
            if not has_annotation(annotations, "@ActiveProfiles"):
                annotations.append('@ActiveProfiles("test")')
            if not has_annotation(annotations, "@Transactional"):
                annotations.append("@Transactional")
        return annotations

    @staticmethod
    def _is_parameterized(scenario: Scenario) -> bool:
        return bool(scenario.examples and scenario.examples.headers and scenario.examples.rows)

    def _test_methods(self, feature: Feature, stubs: Dict[str, Step]) -> List[Dict[str, Any]]:
        """One test per scenario; repeated scenario names get a numeric suffix"""
        tests = []
        taken = set()
        for scenario in feature.scenarios:
            test = self._test_method(scenario, stubs)
            name, counter = test["method_name"], 2
            while name in taken:
                name = f"{test['method_name']}{counter}"
                counter += 1
            taken.add(name)
            test["method_name"] = name
            tests.append(test)
        return tests

    def _test_method(self, scenario: Scenario, stubs: Dict[str, Step]) -> Dict[str, Any]:
        test = {
            "method_name": test_method_name(scenario.name),
            "display_name": java_comment(scenario.name),
            "tags": java_comment(", ".join(scenario.tags)),
            "csv_rows": [],
            "parameters": [],
            "context_lines": [],
            "calls": [self._step_call(step, stubs) for step in scenario.steps],
        }

        if self._is_parameterized(scenario):
            names: List[str] = []
            for index, header in enumerate(scenario.examples.headers):
                names.append(parameter_name(header, index, taken=names))
            test["parameters"] = [f"String {name}" for name in names]
            test["context_lines"] = [
                f"testContext.put({java_string(header)}, {name})"
                for header, name in zip(scenario.examples.headers, names)
            ]
            test["csv_rows"] = [self._csv_row(row) for row in scenario.examples.rows]

        return test

    @staticmethod
    def _csv_row(row) -> str:
        cells = []
        for cell in row:
            if not cell or "'" in cell or "|" in cell:
                cell = "'" + cell.replace("'", "''") + "'"
            cells.append(cell)
        return java_string(" | ".join(cells))

    @staticmethod
    def _step_call(step: Step, stubs: Dict[str, Step]) -> str:
        """Call expression for a step, shaped by the signature of its (shared) stub"""
        name = step_method_name(step.keyword, step.text)
        stub = stubs.get(name, step)

        if stub.data_table:
            rows = step.data_table or ()
            literal = ", ".join(
                "{" + ", ".join(java_string(cell) for cell in row) + "}" for row in rows
            )
            return f"{name}(new String[][] {{{literal}}})"
        if stub.doc_string is not None:
            return f"{name}({java_string(step.doc_string or '')})"
        return f"{name}()"

    @staticmethod
    def _stub(name: str, step: Step) -> Dict[str, Any]:
        stub = {
            "name": name,
            "parameter": "",
            "description": java_comment(f"{step.keyword} {step.text}"),
            "notes": [],
        }
        if step.data_table:
            stub["parameter"] = "String[][] dataTable"
            stub["notes"].append(f"Handle data table with {len(step.data_table)} rows")
        elif step.doc_string is not None:
            stub["parameter"] = "String docString"
            stub["notes"].append("Handle doc string content")
        return stub

    @staticmethod
    def _step_definition(name: str, step: Step) -> Dict[str, Any]:
        pattern = step_pattern(step.text)
        parameters = [
            f"{java_type} arg{index}" for index, java_type in enumerate(capture_types(pattern))
        ]
        if step.data_table:
            parameters.append("DataTable dataTable")
        elif step.doc_string is not None:
            parameters.append("String docString")

        return {
            "annotation": "Given" if step.keyword in ("And", "But") else step.keyword,
            "pattern": java_string(pattern),
            "name": name,
            "parameters": parameters,
            "description": java_comment(step.text),
        }
