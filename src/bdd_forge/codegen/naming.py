"""
Identifier and literal derivation for generated Java source.

Names are derived deterministically from feature text, so two steps whose
text normalizes to the same words share one stub method.
"""

import re
from typing import List

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9\s]")
_DIGIT_RUN = re.compile(r"\d+")
_CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-z]+\b")
_CAPTURE_GROUP = re.compile(r"\(\\d\+\)|\(\.\+\)")

NUMERIC_CAPTURE = r"(\d+)"
GENERIC_CAPTURE = "(.+)"

JAVA_KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "true", "false", "null",
})


def _words(text: str) -> List[str]:
    return _NON_ALPHANUMERIC.sub("", text).split()


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def class_name_for(feature_name: str) -> str:
    """'User Login' -> 'UserLoginTest', '2FA Login' -> 'Feature2faLoginTest'"""
    base = "".join(_capitalize(word) for word in _words(feature_name))
    if base[:1].isdigit():
        base = "Feature" + base
    return base + "Test"


def test_method_name(scenario_name: str) -> str:
    """'Successful login' -> 'testSuccessfulLogin'"""
    return "test" + "".join(_capitalize(word) for word in _words(scenario_name))


def step_method_name(keyword: str, text: str) -> str:
    """('Given', 'I am on login page') -> 'givenIAmOnLoginPage'"""
    words = _words(text)
    camel = "".join(
        word.lower() if index == 0 else _capitalize(word)
        for index, word in enumerate(words)
    )
    return keyword.lower() + camel[:1].upper() + camel[1:]


def step_pattern(text: str) -> str:
    """
    Derive an anchored Cucumber regex from step text.

    Digit runs become a numeric capture, then capitalized words become a
    generic capture. This is a coarse heuristic: proper nouns and units are
    captured too, and regex metacharacters in the text are left as they are.
    """
    pattern = _DIGIT_RUN.sub(lambda _: NUMERIC_CAPTURE, text)
    pattern = _CAPITALIZED_WORD.sub(GENERIC_CAPTURE, pattern)
    return f"^{pattern}$"


def capture_types(pattern: str) -> List[str]:
    """Java parameter types for the capture groups of a derived pattern, in order"""
    return [
        "int" if group == NUMERIC_CAPTURE else "String"
        for group in _CAPTURE_GROUP.findall(pattern)
    ]


def parameter_name(label: str, index: int, taken=()) -> str:
    """Turn an Examples header into a usable Java parameter name"""
    words = _words(label)
    name = "".join(
        word.lower() if position == 0 else _capitalize(word)
        for position, word in enumerate(words)
    )
    if not name or name[0].isdigit() or name in JAVA_KEYWORDS:
        name = f"arg{index}"
    while name in taken:
        name = f"{name}{index}"
    return name


def java_string(text: str) -> str:
    """Quote text as a Java string literal; braces are written as unicode escapes"""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("{", "\\u007B")
        .replace("}", "\\u007D")
    )
    return f'"{escaped}"'


def java_comment(text: str) -> str:
    """Make free text safe for a single-line Java comment"""
    return (
        " ".join(text.split())
        .replace("\\", "\\\\")
        .replace("{", "\\u007B")
        .replace("}", "\\u007D")
    )
