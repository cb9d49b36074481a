from PIL import Image

from snapframe.imaging.transparency import has_transparency, sample_grid_size, sample_steps


def test_opaque_rgb_image_has_no_transparency():
    assert has_transparency(Image.new("RGB", (50, 50), "red")) is False


def test_opaque_rgba_image_has_no_transparency():
    assert has_transparency(Image.new("RGBA", (300, 200), (10, 20, 30, 255))) is False


def test_semi_transparent_pixel_on_grid_is_detected():
    img = Image.new("RGBA", (300, 300), (0, 0, 0, 255))
    img.putpixel((0, 0), (0, 0, 0, 254))
    assert has_transparency(img) is True


def test_transparent_region_between_grid_points_is_missed():
    img = Image.new("RGBA", (1000, 1000), (0, 0, 0, 255))
    step_x, step_y = sample_steps(*img.size)
    assert (step_x, step_y) == (10, 10)
    img.putpixel((5, 5), (0, 0, 0, 0))
    assert has_transparency(img) is False


def test_palette_image_with_transparency_is_detected():
    img = Image.new("P", (20, 20), 0)
    img.info["transparency"] = 0
    assert has_transparency(img) is True


def test_grid_size_bounds():
    assert sample_grid_size(10, 10) == 10
    assert sample_grid_size(500, 500) == 50
    assert sample_grid_size(5000, 5000) == 100
    assert sample_steps(5, 5) == (1, 1)
