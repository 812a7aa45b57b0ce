# ssrportal/services/scoring.py
"""
Evaluation rubric arithmetic.

Group marks (same for every member):
    poster 2 + video 3 + report 3 + ppt 3 = group score 11
Per member:
    individual score 3 (mentor input)
    learning 2 + presentation 2 + contribution 2 = external evaluator marks 6
    group score + individual score = mentor total 14
    group score + individual score + external marks = total 20

Plain addition over Decimal, in half-point steps. No weighting or rounding.
Inputs must be validated with ``validate_bounds`` before they are summed.
"""
from collections import namedtuple
from decimal import Decimal, InvalidOperation

from ssrportal.errors import FieldError

ZERO = Decimal("0")
HALF_STEP = Decimal("0.5")

MarkBound = namedtuple("MarkBound", ["field", "label", "minimum", "maximum"])

GROUP_BOUNDS = (
    MarkBound("posterMarks", "Poster marks", ZERO, Decimal("2")),
    MarkBound("videoMarks", "Video marks", ZERO, Decimal("3")),
    MarkBound("reportMarks", "Report marks", ZERO, Decimal("3")),
    MarkBound("pptMarks", "PPT marks", ZERO, Decimal("3")),
)

MEMBER_BOUNDS = (
    MarkBound("individualScore", "Individual score", ZERO, Decimal("3")),
    MarkBound("learningContribution", "Philosophy/idea about SSR", ZERO, Decimal("2")),
    MarkBound("presentationSkill", "Presentation skill", ZERO, Decimal("2")),
    MarkBound("contributionToProject", "Learnings", ZERO, Decimal("2")),
)

MAX_GROUP_SCORE = sum((b.maximum for b in GROUP_BOUNDS), ZERO)                       # 11
MAX_EXTERNAL_MARKS = sum((b.maximum for b in MEMBER_BOUNDS[1:]), ZERO)              # 6
MAX_MENTOR_TOTAL = MAX_GROUP_SCORE + MEMBER_BOUNDS[0].maximum                        # 14
MAX_TOTAL = MAX_MENTOR_TOTAL + MAX_EXTERNAL_MARKS                                    # 20


class BoundsError(FieldError):
    """Value outside its rubric range."""

    def __init__(self, field, value, minimum, maximum, label=None):
        message = f"{label or field} must be between {_fmt(minimum)} and {_fmt(maximum)}"
        super().__init__(field, message, value=value, minimum=minimum, maximum=maximum)


def _fmt(d):
    d = Decimal(d)
    return str(d.quantize(Decimal(1))) if d == d.to_integral_value() else str(d)


def to_marks(field, value, label=None):
    """
    Parse a raw JSON value into a half-step Decimal.

    Accepts ints, floats and numeric strings. Raises FieldError for
    missing, non-numeric or non-half-step values.
    """
    label = label or field
    if value is None or value == "":
        raise FieldError(field, f"{label} is required", value=value)
    if isinstance(value, bool):
        raise FieldError(field, f"{label} must be a number", value=value)
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise FieldError(field, f"{label} must be a number", value=value)
    if not d.is_finite():
        raise FieldError(field, f"{label} must be a number", value=value)
    if (d / HALF_STEP) != (d / HALF_STEP).to_integral_value():
        raise FieldError(field, f"{label} must be in steps of 0.5", value=value)
    # normalise 2 / 2.0 / "2.00" to one representation
    try:
        return d.quantize(Decimal("0.1"))
    except InvalidOperation:
        # too many digits to quantize; far out of any rubric range anyway
        return d


def validate_bounds(field_name, value, minimum, maximum, label=None):
    """Return ``value`` unchanged if ``minimum <= value <= maximum``; raise BoundsError otherwise."""
    if value < minimum or value > maximum:
        raise BoundsError(field_name, value, minimum, maximum, label=label)
    return value


def clamp(value, minimum, maximum):
    """UI helper for clamp-on-blur. Never used on the server write path."""
    return min(max(value, minimum), maximum)


def group_score(poster, video, report, presentation):
    return poster + video + report + presentation


def external_evaluator_marks(learning, presentation, contribution):
    return learning + presentation + contribution


def mentor_total(group, individual_score):
    return group + individual_score


def grand_total(group, individual_score, external_marks):
    return group + individual_score + external_marks


def member_totals(group, individual_score, learning, presentation, contribution):
    """Derived per-member figures, as shown on the form and persisted."""
    external = external_evaluator_marks(learning, presentation, contribution)
    return {
        "externalEvaluatorMarks": external,
        "mentorTotal": mentor_total(group, individual_score),
        "totalIndividualMarks": grand_total(group, individual_score, external),
    }
