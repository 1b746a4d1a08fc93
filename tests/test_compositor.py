import io

from PIL import Image

from graphics.compositor import (BG_COLOR, render_charm_tile, render_composition,
                                 render_line_preview, render_preview_png, to_png)
from model.checkout import PreviewSource
from model.models import Bracelet, CartLineItem, Charm, SelectionState


def test_charms_are_drawn_on_their_slots(gold_chain, charms, make_instances, loader):
    img = render_composition(gold_chain, make_instances(charms), loader)

    assert img.size == (800, 350)
    for x, y in [(100, 140), (320, 200), (540, 140)]:
        assert img.getpixel((x, y)) == (255, 0, 0, 255)
    assert img.getpixel((320, 20)) == (128, 128, 128, 255)


def test_stored_positions_override_order(gold_chain, charms, make_instances, loader):
    a, b, c = make_instances(charms)
    img = render_composition(gold_chain, (a, b, c), loader, positions={a.instance_id: 2})

    assert img.getpixel((540, 140)) == (255, 0, 0, 255)
    assert img.getpixel((100, 140)) == (128, 128, 128, 255)


def test_grayscale_bracelet_backdrop(loader):
    red_chain = Bracelet(id="b", name="Red", price=1.0, image="bracelets/gold.png", grayscale=True)
    px = render_composition(red_chain, (), loader).getpixel((10, 10))
    assert px[0] == px[1] == px[2]


def test_missing_art_leaves_plain_canvas(loader):
    ghost = Bracelet(id="b", name="Ghost", price=1.0, image="bracelets/missing.png")
    assert render_composition(ghost, (), loader).getpixel((400, 175)) == BG_COLOR
    assert loader.load("bracelets/missing.png") is None


def test_preview_png_needs_bracelet(gold_chain, loader):
    assert render_preview_png(SelectionState(), loader) is None
    png = render_preview_png(SelectionState(bracelet=gold_chain), loader, 400, 175)
    assert Image.open(io.BytesIO(png)).size == (400, 175)


def test_line_preview_sources(gold_chain, charms, make_instances, loader):
    instances = make_instances(charms)
    line = CartLineItem(id="c", bracelet=gold_chain, charms=instances,
                        charm_positions={ci.instance_id: i for i, ci in enumerate(instances)})
    stored = to_png(Image.new("RGBA", (20, 10), (1, 2, 3, 255)))

    source, img = render_line_preview(line, loader, stored)
    assert source is PreviewSource.IMAGE and img.size == (20, 10)

    source, img = render_line_preview(line, loader)
    assert source is PreviewSource.OVERLAY
    assert img.getpixel((320, 200)) == (255, 0, 0, 255)

    bare = CartLineItem(id="c", bracelet=gold_chain, charms=instances)
    assert render_line_preview(bare, loader)[0] is PreviewSource.BACKDROP
    assert render_line_preview(None, loader)[0] is PreviewSource.PLACEHOLDER


def test_unreadable_stored_preview_is_rebuilt(gold_chain, loader):
    line = CartLineItem(id="c", bracelet=gold_chain, charms=())
    source, _ = render_line_preview(line, loader, b"not a png")
    assert source is PreviewSource.BACKDROP


def test_charm_tile_background_toggle(loader):
    charm = Charm(id="charm-dot", name="Dot", price=1.0, image="charms/dot.png",
                  background="backgrounds/blue.png")
    with_bg = render_charm_tile(charm, loader, 96, show_background=True)
    without = render_charm_tile(charm, loader, 96, show_background=False)

    assert with_bg.getpixel((48, 48)) == (255, 0, 0, 255)
    assert with_bg.getpixel((0, 0)) == (0, 0, 255, 255)
    assert without.getpixel((0, 0))[3] == 0
    assert without.getpixel((48, 48)) == (255, 0, 0, 255)
