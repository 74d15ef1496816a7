import cv2
import numpy as np
import pytest

from skinadvisor.models.skin_analyzer import ImageDecodeError, SkinAnalyzer


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


def uniform_image(value: int, size=(240, 320)) -> np.ndarray:
    return np.full((size[0], size[1], 3), value, dtype=np.uint8)


@pytest.fixture
def analyzer():
    return SkinAnalyzer()


def test_bright_uniform_skin_reads_as_clear_and_oily(analyzer):
    result = analyzer.analyze_skin(encode_png(uniform_image(200)))

    assert result["readings"]["acne_spots"] == 0
    assert result["readings"]["pigmentation_spots"] == 0
    assert result["readings"]["edge_density"] == 0
    assert result["assessment"] == {
        "acne": "clear",
        "oiliness": "high",
        "pigmentation": "none",
        "wrinkles": "none",
    }


def test_dark_image_reads_as_low_oiliness(analyzer):
    result = analyzer.analyze_skin(encode_png(uniform_image(40)))

    assert result["assessment"]["oiliness"] == "low"


def test_dark_spots_are_counted(analyzer):
    image = uniform_image(180)
    rng = np.random.default_rng(7)
    for y, x in rng.integers(20, 220, size=(40, 2)):
        cv2.circle(image, (int(x) + 40, int(y)), 3, (40, 40, 40), -1)

    readings = analyzer.measure(image)

    assert readings.acne_spots > 0
    assert readings.pigmentation_spots > 5
    assert readings.edge_density > 0


def test_dense_edges_read_as_wrinkles(analyzer):
    image = uniform_image(220)
    for y in range(0, image.shape[0], 6):
        cv2.line(image, (0, y), (image.shape[1], y), (0, 0, 0), 1)

    result = analyzer.analyze_skin(encode_png(image))

    assert result["readings"]["edge_density"] > 15
    assert result["assessment"]["wrinkles"] == "early"


@pytest.mark.parametrize("data", [b"", b"definitely not an image"])
def test_unreadable_upload(analyzer, data):
    with pytest.raises(ImageDecodeError):
        analyzer.analyze_skin(data)
