from typing import Any, Dict, Iterable, List

from jinja2 import Environment

DEFAULT_IMPORTS = [
    "import java.util.HashMap;",
    "import java.util.Map;",
    "import org.junit.jupiter.api.AfterEach;",
    "import org.junit.jupiter.api.BeforeEach;",
    "import org.junit.jupiter.api.Test;",
    "import org.springframework.boot.test.context.SpringBootTest;",
    "import org.springframework.test.context.ActiveProfiles;",
]

SPRING_BOOT_IMPORTS = [
    "import org.springframework.beans.factory.annotation.Autowired;",
    "import org.springframework.test.context.junit.jupiter.SpringJUnitConfig;",
    "import org.springframework.transaction.annotation.Transactional;",
]

PARAMETERIZED_IMPORTS = [
    "import org.junit.jupiter.params.ParameterizedTest;",
    "import org.junit.jupiter.params.provider.CsvSource;",
]

STATIC_IMPORTS = [
    "import static org.junit.jupiter.api.Assertions.*;",
]

WEB_ANNOTATION = "@WebMvcTest"
DATA_ANNOTATION = "@DataJpaTest"

# Imports pulled in when a class annotation starting with the key is present
ANNOTATION_IMPORTS = {
    WEB_ANNOTATION: [
        "import org.springframework.boot.test.autoconfigure.web.servlet.WebMvcTest;",
        "import org.springframework.test.web.servlet.MockMvc;",
        "import static org.springframework.test.web.servlet.request.MockMvcRequestBuilders.*;",
        "import static org.springframework.test.web.servlet.result.MockMvcResultMatchers.*;",
    ],
    "@AutoConfigureMockMvc": [
        "import org.springframework.boot.test.autoconfigure.web.servlet.AutoConfigureMockMvc;",
        "import org.springframework.test.web.servlet.MockMvc;",
    ],
    DATA_ANNOTATION: [
        "import org.springframework.boot.test.autoconfigure.orm.jpa.DataJpaTest;",
        "import org.springframework.boot.test.autoconfigure.orm.jpa.TestEntityManager;",
    ],
    "@AutoConfigureTestDatabase": [
        "import org.springframework.boot.test.autoconfigure.jdbc.AutoConfigureTestDatabase;",
    ],
}

# Generated fields injected for annotations that bring a test helper with them
ANNOTATION_FIELDS = {
    WEB_ANNOTATION: {"annotation": "@Autowired", "type": "MockMvc", "name": "mockMvc"},
    "@AutoConfigureMockMvc": {"annotation": "@Autowired", "type": "MockMvc", "name": "mockMvc"},
    DATA_ANNOTATION: {"annotation": "@Autowired", "type": "TestEntityManager", "name": "entityManager"},
}

SPRING_TEST_ANNOTATIONS = ("@SpringBootTest", WEB_ANNOTATION, DATA_ANNOTATION)

_TEST_DATABASE = "@AutoConfigureTestDatabase(replace = AutoConfigureTestDatabase.Replace.NONE)"

# Named class-annotation presets selectable through GenerationConfig.template
TEMPLATE_PRESETS = {
    "integration": [
        "@SpringBootTest(webEnvironment = SpringBootTest.WebEnvironment.RANDOM_PORT)",
        _TEST_DATABASE,
    ],
    "web": [WEB_ANNOTATION, _TEST_DATABASE],
    "data": [DATA_ANNOTATION, _TEST_DATABASE],
}

STEP_DEFINITION_IMPORTS = [
    "import io.cucumber.java.PendingException;",
    "import io.cucumber.java.en.Given;",
    "import io.cucumber.java.en.Then;",
    "import io.cucumber.java.en.When;",
    "import org.springframework.boot.test.context.SpringBootTest;",
]

DATA_TABLE_IMPORT = "import io.cucumber.datatable.DataTable;"

JUNIT_TEMPLATE = """\
package {{ package_name }};

{% for line in imports %}
{{ line }}
{% endfor %}

{% for annotation in class_annotations %}
{{ annotation }}
{% endfor %}
public class {{ class_name }} {
{% for field in fields %}

    {{ field.annotation }}
    private {{ field.type }} {{ field.name }};
{% endfor %}

    private TestContext testContext;

    @BeforeEach
    void setUp() {
        testContext = new TestContext();
        // Setup code for {{ feature_name }}
{% for call in setup_calls %}
        {{ call }};
{% endfor %}
    }

    @AfterEach
    void tearDown() {
        // Cleanup code for {{ feature_name }}
        testContext = null;
    }
{% for test in tests %}

{% if test.tags %}
    // Tags: {{ test.tags }}
{% endif %}
{% if test.csv_rows %}
    @ParameterizedTest
    @CsvSource(delimiter = '|', value = {
{% for row in test.csv_rows %}
        {{ row }}{{ "," if not loop.last else "" }}
{% endfor %}
    })
    void {{ test.method_name }}({{ test.parameters | join(", ") }}) {
{% else %}
    @Test
    void {{ test.method_name }}() {
{% endif %}
        // {{ test.display_name }}
{% for line in test.context_lines %}
        {{ line }};
{% endfor %}
{% for call in test.calls %}
        {{ call }};
{% endfor %}
    }
{% endfor %}
{% for stub in stubs %}

    private void {{ stub.name }}({{ stub.parameter }}) {
        // Implement: {{ stub.description }}
{% for note in stub.notes %}
        // {{ note }}
{% endfor %}
        fail("Step implementation pending");
    }
{% endfor %}

    private static class TestContext {
        private final Map<String, Object> values = new HashMap<>();

        void put(String key, Object value) {
            values.put(key, value);
        }

        Object get(String key) {
            return values.get(key);
        }
    }
}
"""

STEP_DEFINITIONS_TEMPLATE = """\
package {{ package_name }};

{% for line in imports %}
{{ line }}
{% endfor %}

{% for annotation in class_annotations %}
{{ annotation }}
{% endfor %}
public class {{ class_name }} {
{% for definition in definitions %}

    @{{ definition.annotation }}({{ definition.pattern }})
    public void {{ definition.name }}({{ definition.parameters | join(", ") }}) {
        // Implement: {{ definition.description }}
        throw new PendingException();
    }
{% endfor %}
}
"""


def unique(lines: Iterable[str]) -> List[str]:
    """Drop repeated lines, keeping first-seen order"""
    seen = set()
    result = []
    for line in lines:
        if line not in seen:
            seen.add(line)
            result.append(line)
    return result


def has_annotation(annotations: Iterable[str], token: str) -> bool:
    return any(annotation.strip().startswith(token) for annotation in annotations)


def annotation_imports(annotations: List[str]) -> List[str]:
    imports = []
    for token, lines in ANNOTATION_IMPORTS.items():
        if has_annotation(annotations, token):
            imports.extend(lines)
    return imports


def annotation_fields(annotations: List[str]) -> List[Dict[str, str]]:
    fields = []
    for token, field in ANNOTATION_FIELDS.items():
        if has_annotation(annotations, token) and field not in fields:
            fields.append(field)
    return fields


class TemplateEngine:
    """Renders the built-in Java templates"""

    def __init__(self):
        self.env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
        self._junit = self.env.from_string(JUNIT_TEMPLATE)
        self._step_definitions = self.env.from_string(STEP_DEFINITIONS_TEMPLATE)

    def render_test_class(self, context: Dict[str, Any]) -> str:
        return self._junit.render(**context)

    def render_step_definitions(self, context: Dict[str, Any]) -> str:
        return self._step_definitions.render(**context)

    @staticmethod
    def available_templates() -> List[str]:
        return sorted(TEMPLATE_PRESETS)
