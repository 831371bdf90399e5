from jinja2 import Environment

from .models import ParsedDocument

FEATURE_TEMPLATE = """\
{% if feature.tags %}
{{ feature.tags | join(' ') }}
{% endif %}
Feature: {{ feature.name }}
{% if feature.description %}
{% for line in feature.description.split('\\n') %}
  {{ line }}
{% endfor %}
{% endif %}
{% if feature.background %}

  Background:
{% for step in feature.background.steps %}
{{ render_step(step) }}
{% endfor %}
{% endif %}
{% for scenario in feature.scenarios %}

{% if scenario.tags %}
  {{ scenario.tags | join(' ') }}
{% endif %}
  {{ 'Scenario Outline' if scenario.is_outline else 'Scenario' }}: {{ scenario.name }}
{% for step in scenario.steps %}
{{ render_step(step) }}
{% endfor %}
{% if scenario.examples and scenario.examples.headers %}

    Examples:
      {{ table_row(scenario.examples.headers) }}
{% for row in scenario.examples.rows %}
      {{ table_row(row) }}
{% endfor %}
{% endif %}
{% endfor %}
{% if comments %}

{% for comment in comments %}
{{ comment }}
{% endfor %}
{% endif %}
"""

STEP_TEMPLATE = """\
    {{ step.keyword }} {{ step.text }}
{% if step.doc_string is not none %}
      \"\"\"
{% for line in step.doc_string.split('\\n') %}
      {{ line }}
{% endfor %}
      \"\"\"
{% endif %}
{% if step.data_table %}
{% for row in step.data_table %}
      {{ table_row(row) }}
{% endfor %}
{% endif %}"""


def table_row(cells) -> str:
    return "| " + " | ".join(cells) + " |"


class GherkinFormatter:
    """Renders a ParsedDocument back into canonical feature-file text"""

    def __init__(self):
        self.env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
        self.env.globals["table_row"] = table_row
        self._step_template = self.env.from_string(STEP_TEMPLATE)
        self.env.globals["render_step"] = self._render_step
        self._feature_template = self.env.from_string(FEATURE_TEMPLATE)

    def _render_step(self, step) -> str:
        return self._step_template.render(step=step).rstrip("\n")

    def format(self, document: ParsedDocument) -> str:
        """
        Format a parsed document as feature-file text.

        Comments are emitted as a trailing block since they are not tied to
        positions in the document.
        """
        return self._feature_template.render(
            feature=document.feature,
            comments=document.comments,
        )
