"""Input validation for polls and comments, run before any storage access."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from polly.core.constants import BusinessLimits, ErrorMessages
from polly.core.errors import ValidationError


def normalize_option_text(text: str) -> str:
    """Comparison key of an option: surrounding whitespace removed, case-folded."""
    return text.strip().casefold()


@dataclass
class PollInput:
    title: str
    description: Optional[str]
    options: List[str] = field(default_factory=list)

    @property
    def normalized_options(self) -> List[str]:
        return [normalize_option_text(option) for option in self.options]


def _error(loc: List[Any], msg: str, type_: str = "value_error") -> Dict[str, Any]:
    return {"loc": loc, "msg": msg, "type": type_}


def validate_poll_input(title: Optional[str], description: Optional[str],
                        options: Optional[Sequence[str]]) -> PollInput:
    """Check and clean poll data.

    Collects every problem instead of stopping at the first one, and raises a
    single ValidationError listing them.
    """
    errors = []

    clean_title = (title or "").strip()
    if not clean_title:
        errors.append(_error(["title"], "Poll title is required"))
    elif len(clean_title) > BusinessLimits.MAX_POLL_TITLE_LENGTH:
        errors.append(_error(
            ["title"], f"Poll title must be at most {BusinessLimits.MAX_POLL_TITLE_LENGTH} characters"
        ))

    clean_description = description.strip() if description else None
    if not clean_description:
        clean_description = None
    elif len(clean_description) > BusinessLimits.MAX_POLL_DESCRIPTION_LENGTH:
        errors.append(_error(
            ["description"],
            f"Description must be at most {BusinessLimits.MAX_POLL_DESCRIPTION_LENGTH} characters"
        ))

    options = list(options or [])
    if len(options) < BusinessLimits.MIN_POLL_OPTIONS:
        errors.append(_error(["options"], f"At least {BusinessLimits.MIN_POLL_OPTIONS} options are required"))
    elif len(options) > BusinessLimits.MAX_POLL_OPTIONS:
        errors.append(_error(["options"], f"At most {BusinessLimits.MAX_POLL_OPTIONS} options are allowed"))

    clean_options = []
    seen = {}
    for index, option in enumerate(options):
        text = (option or "").strip() if isinstance(option, str) or option is None else None
        if text is None:
            errors.append(_error(["options", index], "Option text must be a string", "type_error"))
            continue
        if not text:
            errors.append(_error(["options", index], "Option text cannot be empty"))
            continue
        if len(text) > BusinessLimits.MAX_POLL_OPTION_LENGTH:
            errors.append(_error(
                ["options", index],
                f"Option text must be at most {BusinessLimits.MAX_POLL_OPTION_LENGTH} characters"
            ))
            continue

        key = normalize_option_text(text)
        if key in seen:
            errors.append(_error(
                ["options", index], f"{ErrorMessages.DUPLICATE_OPTION}: '{text}' repeats option {seen[key]}"
            ))
            continue
        seen[key] = index
        clean_options.append(text)

    if errors:
        raise ValidationError("Invalid poll data provided", errors=errors)

    return PollInput(title=clean_title, description=clean_description, options=clean_options)


def validate_comment_content(content: Optional[str]) -> str:
    text = (content or "").strip()
    if len(text) < BusinessLimits.MIN_COMMENT_LENGTH:
        raise ValidationError(
            "Comment cannot be empty", errors=[_error(["content"], "Comment cannot be empty")]
        )
    if len(text) > BusinessLimits.MAX_COMMENT_LENGTH:
        raise ValidationError(
            "Comment too long",
            errors=[_error(["content"], f"Comment must be at most {BusinessLimits.MAX_COMMENT_LENGTH} characters")]
        )
    return text
