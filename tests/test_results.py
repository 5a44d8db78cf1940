import pytest

from client.results import (
    DEFAULT_DETAILS,
    InvalidPrediction,
    PredictionResult,
    format_confidence,
    is_benign_label,
    parse_prediction,
)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"label": "Benign"}, "Benign"),
        ({"prediction": "Malignant"}, "Malignant"),
        ({"label": "Melanoma", "prediction": "Benign"}, "Melanoma"),
        ({"label": None, "prediction": "Benign"}, "Benign"),
        ({}, "Unknown"),
    ],
)
def test_label_precedence(payload, expected):
    assert parse_prediction(payload).label == expected


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"confidence": 0.8234}, 0.8234),
        ({"probability": 0.4}, 0.4),
        ({"confidence": 1}, 1.0),
        ({"confidence": "0.9", "probability": 0.3}, 0.3),
        ({"confidence": "0.9"}, 0),
        ({"confidence": True}, 0),
        ({}, 0),
    ],
)
def test_confidence_precedence(payload, expected):
    assert parse_prediction(payload).confidence == expected


def test_details_fall_back_to_message_then_disclaimer():
    assert parse_prediction({"details": "d", "message": "m"}).details == "d"
    assert parse_prediction({"message": "m"}).details == "m"
    assert parse_prediction({}).details == DEFAULT_DETAILS


@pytest.mark.parametrize("payload", [[], "benign", None, {"label": 3}, {"details": ["x"]}])
def test_structurally_invalid_payloads_are_rejected(payload):
    with pytest.raises(InvalidPrediction):
        parse_prediction(payload)


def test_confidence_display():
    assert format_confidence(0.8234) == "82.3%"
    assert format_confidence(0) == "0.0%"
    assert PredictionResult(label="x", confidence=1.0).confidence_percent == "100.0%"


@pytest.mark.parametrize("label", ["Benign", "benign ", "BENIGN", "Benign keratosis"])
def test_benign_styling(label):
    assert is_benign_label(label)
    assert PredictionResult(label=label, confidence=0.5).is_benign


@pytest.mark.parametrize("label", ["malignant", "Melanoma", "Unknown", ""])
def test_non_benign_styling(label):
    assert not is_benign_label(label)
