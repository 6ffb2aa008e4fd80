"""Display wording for evaluation results; rendering itself is up to the client."""

from pwcheck.models import EvaluationResult, ResultView
from pwcheck.pwned import FOUND
from pwcheck.strength import strength_class, strength_label

LOADING_VIEW = ResultView(type="loading", headline="Checking password security...")

LEAKED_DETAIL = (
    "This password appears in known data breaches. "
    "Choose a different password immediately."
)


def describe(result: EvaluationResult) -> ResultView:
    label = strength_label(result.strength)
    css = strength_class(result.strength)
    # unknown renders like not_found: a failed check is never shown as a leak
    if result.leak == FOUND:
        return ResultView(
            type="leaked",
            headline="Security Alert: Compromised Password Detected",
            detail=LEAKED_DETAIL,
            strength_label=label,
            strength_class=css,
        )
    if result.strength >= 4:
        kind, headline = "safe", "Password Security: Excellent"
    elif result.strength >= 2:
        kind, headline = "weak", "Password Security: Needs Improvement"
    else:
        kind, headline = "weak", "Password Security: Critical Risk"
    return ResultView(
        type=kind,
        headline=headline,
        detail=f"Security Level: {label}",
        strength_label=label,
        strength_class=css,
    )
