import pytest
from PIL import Image

from images import ImageProcessor, generate_html


@pytest.fixture
def source_image(tmp_path):
    """Create a 1000x500 PNG source image."""
    path = tmp_path / "src" / "photo.png"
    path.parent.mkdir()
    Image.new("RGBA", (1000, 500), (200, 100, 50, 255)).save(path)
    return path


@pytest.fixture
def processor(tmp_path):
    """Create a processor writing to a temporary output directory."""
    return ImageProcessor(tmp_path / "output" / "img", formats=("webp", "jpeg"))


def test_process_writes_variants(processor, source_image):
    """Test that each format is resized and written."""
    metadata = processor.process(source_image, widths=[512])

    assert list(metadata) == ["webp", "jpeg"]
    for fmt, variants in metadata.items():
        assert len(variants) == 1
        variant = variants[0]
        assert (variant.width, variant.height) == (512, 256)
        assert variant.path.exists()
        assert variant.url.startswith("/img/")
        assert variant.url.endswith(f"-512.{fmt}")
        with Image.open(variant.path) as written:
            assert written.size == (512, 256)


def test_process_does_not_upscale(processor, source_image):
    """Test that widths larger than the source are clamped."""
    metadata = processor.process(source_image, widths=[2000, 500])

    assert [v.width for v in metadata["jpeg"]] == [500, 1000]


def test_process_keeps_original_width(processor, source_image):
    """Test that no width means the original size."""
    metadata = processor.process(source_image, formats=["jpeg"])

    assert metadata["jpeg"][0].width == 1000


def test_process_is_memoized(processor, source_image):
    """Test that the same request is processed once."""
    first = processor.process(source_image, widths=[512])

    assert processor.process(source_image, widths=[512]) is first


def test_process_svg_short_circuit(processor, tmp_path):
    """Test that SVG sources are copied, not rasterized."""
    svg = tmp_path / "logo.svg"
    svg.write_text('<svg xmlns="http://www.w3.org/2000/svg"/>', encoding="utf-8")

    metadata = processor.process(svg, widths=[512])

    assert list(metadata) == ["svg"]
    assert metadata["svg"][0].path.read_text(encoding="utf-8") == svg.read_text(encoding="utf-8")
    assert metadata["svg"][0].url.endswith(".svg")


def test_process_unknown_format(processor, source_image):
    """Test that an unsupported format is reported."""
    with pytest.raises(ValueError):
        processor.process(source_image, formats=["bmp2"])


def test_generate_html_picture(processor, source_image):
    """Test the <picture> markup for several formats."""
    metadata = processor.process(source_image, widths=[512])

    html = generate_html(metadata, {"alt": "Une photo", "sizes": "100vw", "loading": "lazy", "decoding": "async"})

    assert html.startswith("<picture><source ")
    assert 'type="image/webp"' in html
    assert 'sizes="100vw"' in html
    assert 'alt="Une photo"' in html
    assert 'width="512" height="256"' in html
    assert 'loading="lazy" decoding="async"' in html
    assert html.endswith("></picture>")


def test_generate_html_single_format(processor, source_image):
    """Test that a single format gives a plain <img>."""
    metadata = processor.process(source_image, widths=[512], formats=["jpeg"])

    html = generate_html(metadata, {"alt": ""})

    assert html.startswith('<img alt="" src="/img/')
    assert "<picture>" not in html


def test_generate_html_escapes_alt(processor, source_image):
    """Test that attribute values are escaped."""
    metadata = processor.process(source_image, formats=["jpeg"])

    assert 'alt="&lt;b&gt; &#34;x&#34;"' in generate_html(metadata, {"alt": '<b> "x"'})


def test_generate_html_requires_alt(processor, source_image):
    """Test that a missing alt is an error."""
    metadata = processor.process(source_image, formats=["jpeg"])

    with pytest.raises(ValueError, match="alt"):
        generate_html(metadata, {"sizes": "100vw"})
