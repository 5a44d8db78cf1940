from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Optional


DEFAULT_DETAILS = (
    "This is an AI-based preliminary assessment. "
    "Please consult a dermatologist for medical advice."
)
UNKNOWN_LABEL = "Unknown"


class InvalidPrediction(ValueError):
    pass


@dataclass(frozen=True)
class PredictionResult:
    label: str
    confidence: float
    details: str = DEFAULT_DETAILS

    @property
    def is_benign(self) -> bool:
        return is_benign_label(self.label)

    @property
    def confidence_percent(self) -> str:
        return format_confidence(self.confidence)


def is_benign_label(label: str) -> bool:
    """Display heuristic: anything without "benign" gets warning styling."""
    return "benign" in label.lower()


def format_confidence(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    return float(value)


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def parse_prediction(data: Any) -> PredictionResult:
    """Build a PredictionResult from an inference backend payload.

    Precedence:
      label       -> ``label``, then ``prediction``, then "Unknown"
      confidence  -> ``confidence``, then ``probability`` (numbers only), then 0
      details     -> ``details``, then ``message``, then the disclaimer

    Payloads that are not JSON objects, or carry a non-string label or
    details, are rejected with InvalidPrediction.
    """
    if not isinstance(data, dict):
        raise InvalidPrediction("Unexpected response from the analysis service.")

    label = _first_present(data, "label", "prediction")
    if label is None:
        label = UNKNOWN_LABEL
    elif not isinstance(label, str):
        raise InvalidPrediction("Unexpected response from the analysis service.")

    confidence = _number(data.get("confidence"))
    if confidence is None:
        confidence = _number(data.get("probability"))
    if confidence is None:
        confidence = 0.0

    details = _first_present(data, "details", "message")
    if details is None:
        details = DEFAULT_DETAILS
    elif not isinstance(details, str):
        raise InvalidPrediction("Unexpected response from the analysis service.")

    return PredictionResult(label=label, confidence=confidence, details=details)
