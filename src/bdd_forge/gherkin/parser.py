import logging
from typing import List, Optional, Tuple

from ..core.exceptions import EmptyFeatureName, MalformedDocument
from .models import (
    STEP_KEYWORDS,
    Background,
    DataTable,
    Examples,
    Feature,
    ParsedDocument,
    Scenario,
    Step,
)

logger = logging.getLogger(__name__)

FEATURE = "Feature:"
BACKGROUND = "Background:"
SCENARIO = "Scenario:"
SCENARIO_OUTLINE = "Scenario Outline:"
EXAMPLES = "Examples:"

# Rule:/Example: are not modelled, they only terminate description and step blocks
BLOCK_KEYWORDS = (FEATURE, BACKGROUND, SCENARIO, SCENARIO_OUTLINE, EXAMPLES, "Rule:", "Example:")
DOC_STRING_DELIMITERS = ('"""', "'''")


def is_block_keyword(line: str) -> bool:
    return line.startswith(BLOCK_KEYWORDS)


def is_step_line(line: str) -> bool:
    return any(line.startswith(f"{keyword} ") for keyword in STEP_KEYWORDS)


def split_tags(line: str) -> List[str]:
    return [token for token in line.split() if token.startswith("@")]


def split_table_row(line: str) -> Tuple[str, ...]:
    parts = line.strip().split("|")
    if parts and not parts[0].strip():
        parts = parts[1:]
    if parts and not parts[-1].strip():
        parts = parts[:-1]
    return tuple(cell.strip() for cell in parts)


class _LineScanner:
    """Cursor over the physical lines of one document"""

    def __init__(self, text: str):
        self.lines = [line.rstrip("\r") for line in text.split("\n")]
        self.index = 0

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.lines)

    @property
    def raw(self) -> str:
        return self.lines[self.index] if not self.at_end else ""

    @property
    def current(self) -> str:
        return self.raw.strip()

    @property
    def line_number(self) -> int:
        return self.index + 1

    def advance(self) -> None:
        self.index += 1


class GherkinParser:
    """
    Tolerant, line-oriented parser for feature files.

    Lines that match nothing are skipped rather than rejected; structural
    problems are reported by the validators in ``validator.py``.

    Example:
        parser = GherkinParser()
        document = parser.parse(open("login.feature").read())
        print(document.feature.name)
    """

    def parse(self, text: str) -> ParsedDocument:
        """
        Parse feature-file text into a ParsedDocument.

        Args:
            text: Raw feature-file content

        Returns:
            ParsedDocument with the feature and all comment lines

        Raises:
            EmptyFeatureName: If no named ``Feature:`` line is present
            MalformedDocument: If the input is not text
        """
        if not isinstance(text, str):
            raise MalformedDocument(f"Feature text must be a string, got {type(text).__name__}")

        scanner = _LineScanner(text)
        feature = self._parse_feature(scanner)
        comments = self._extract_comments(scanner.lines)

        logger.debug(
            f"Parsed feature '{feature.name}' with {len(feature.scenarios)} scenarios "
            f"and {len(comments)} comments"
        )
        return ParsedDocument(feature=feature, comments=tuple(comments))

    def _parse_feature(self, scanner: _LineScanner) -> Feature:
        name: Optional[str] = None
        description = ""
        tags: List[str] = []
        pending_tags: List[str] = []
        background: Optional[Background] = None
        scenarios: List[Scenario] = []

        while not scanner.at_end:
            line = scanner.current

            if line.startswith("@"):
                pending_tags = self._parse_tags(scanner)
                continue

            if line.startswith(FEATURE):
                name = line[len(FEATURE):].strip()
                tags = pending_tags
                pending_tags = []
                scanner.advance()
                description = self._parse_description(scanner)
            elif line.startswith(BACKGROUND):
                pending_tags = []
                scanner.advance()
                background = Background(steps=tuple(self._parse_steps(scanner)))
            elif line.startswith(SCENARIO_OUTLINE):
                pending_tags = []
                scenarios.append(self._parse_scenario(scanner, SCENARIO_OUTLINE))
            elif line.startswith(SCENARIO):
                pending_tags = []
                scenarios.append(self._parse_scenario(scanner, SCENARIO))
            else:
                scanner.advance()

        if not name:
            raise EmptyFeatureName("Feature must have a name")

        return Feature(
            name=name,
            description=description,
            tags=tuple(tags),
            background=background,
            scenarios=tuple(scenarios),
        )

    def _parse_description(self, scanner: _LineScanner) -> str:
        description = []

        while not scanner.at_end:
            line = scanner.current
            if is_block_keyword(line) or line.startswith("@") or is_step_line(line):
                break
            if line and not line.startswith("#"):
                description.append(line)
            scanner.advance()

        return "\n".join(description)

    def _parse_scenario(self, scanner: _LineScanner, keyword: str) -> Scenario:
        name = scanner.current[len(keyword):].strip()
        tags = self._extract_scenario_tags(scanner.lines, scanner.index)

        scanner.advance()
        steps = self._parse_steps(scanner)

        examples = None
        if keyword == SCENARIO_OUTLINE:
            examples = self._parse_examples(scanner)

        return Scenario(
            name=name,
            steps=tuple(steps),
            tags=tuple(tags),
            examples=examples,
        )

    def _parse_steps(self, scanner: _LineScanner) -> List[Step]:
        steps = []

        while not scanner.at_end:
            line = scanner.current
            if is_step_line(line):
                steps.append(self._parse_step(scanner))
            elif is_block_keyword(line):
                break
            else:
                scanner.advance()

        return steps

    def _parse_step(self, scanner: _LineScanner) -> Step:
        keyword, _, text = scanner.current.partition(" ")
        scanner.advance()

        doc_string = self._parse_doc_string(scanner)
        data_table = self._parse_data_table(scanner)

        return Step(
            keyword=keyword,
            text=text.strip(),
            data_table=data_table or None,
            doc_string=doc_string,
        )

    def _parse_doc_string(self, scanner: _LineScanner) -> Optional[str]:
        if scanner.at_end or scanner.current not in DOC_STRING_DELIMITERS:
            return None

        delimiter = scanner.current
        opening_line = scanner.line_number
        indent = len(scanner.raw) - len(scanner.raw.lstrip())
        content = []
        scanner.advance()

        while not scanner.at_end:
            raw = scanner.raw
            if raw.strip() == delimiter:
                scanner.advance()
                return "\n".join(content)
            content.append(self._remove_indent(raw, indent))
            scanner.advance()

        logger.warning(
            f"Doc string opened with {delimiter} on line {opening_line} is never closed, "
            "reading to end of file"
        )
        while content and not content[-1].strip():
            content.pop()
        return "\n".join(content)

    @staticmethod
    def _remove_indent(line: str, indent: int) -> str:
        """Strip up to ``indent`` leading whitespace characters"""
        removable = len(line) - len(line.lstrip())
        return line[min(removable, indent):]

    def _parse_data_table(self, scanner: _LineScanner) -> DataTable:
        rows = []

        while not scanner.at_end and scanner.current.startswith("|"):
            rows.append(split_table_row(scanner.current))
            scanner.advance()

        return tuple(rows)

    def _parse_examples(self, scanner: _LineScanner) -> Examples:
        while not scanner.at_end:
            line = scanner.current

            if line.startswith(EXAMPLES):
                scanner.advance()
                table = self._parse_data_table(scanner)
                if table:
                    return Examples(headers=table[0], rows=table[1:])
                break
            elif is_block_keyword(line):
                break
            else:
                scanner.advance()

        # An outline keeps an (empty) Examples so the validator can flag it
        return Examples(headers=())

    def _parse_tags(self, scanner: _LineScanner) -> List[str]:
        tags = []

        while not scanner.at_end and scanner.current.startswith("@"):
            tags.extend(split_tags(scanner.current))
            scanner.advance()

        return tags

    def _extract_scenario_tags(self, lines: List[str], scenario_index: int) -> List[str]:
        """Collect tag lines directly above a scenario, ignoring blanks and comments"""
        tags: List[str] = []
        index = scenario_index - 1

        while index >= 0:
            line = lines[index].strip()
            if line.startswith("@"):
                tags = split_tags(line) + tags
            elif line and not line.startswith("#"):
                break
            index -= 1

        return tags

    def _extract_comments(self, lines: List[str]) -> List[str]:
        return [line.strip() for line in lines if line.strip().startswith("#")]


_default_parser = GherkinParser()


def parse_feature(text: str) -> ParsedDocument:
    """Parse feature-file text with a shared (stateless) parser"""
    return _default_parser.parse(text)
