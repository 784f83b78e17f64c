import re

_REGEX_METACHARACTERS = re.compile(r"[-/\\^$*+?.()|\[\]{}]")


def escape_regex(text: str) -> str:
    """Escape ``text`` so it matches literally inside a regular expression."""
    return _REGEX_METACHARACTERS.sub(r"\\\g<0>", text)
