"""
Tests for Pillow-based image processing and the upload service.
"""

import io
import struct
import zlib

import pytest
from PIL import Image as PILImage

from catalog.constants import ItemType
from catalog.exceptions import (
    ImageProcessingError,
    InvalidRequestError,
    ItemNotFoundError,
    UploadFailedError,
)
from catalog.images import ImageOptions, create_responsive_images, generate_thumbnail, process_image
from catalog.repositories import ImageRepository, PipeFilters
from catalog.services import catalog_service, image_service
from catalog.services.image_service import UploadedFile


def make_image_bytes(size=(1600, 1600), fmt="PNG", mode="RGB") -> bytes:
    buffer = io.BytesIO()
    PILImage.new(mode, size, "saddlebrown").save(buffer, format=fmt)
    return buffer.getvalue()


def test_process_image_covers_target_box(tmp_path):
    result = process_image(make_image_bytes((1600, 1600)), tmp_path, original_name="square.png")

    assert (result.width, result.height) == (1200, 800)
    assert result.mime_type == "image/webp"
    assert result.filename.startswith("processed-") and result.filename.endswith(".webp")
    assert result.path.exists()
    assert result.file_size == result.path.stat().st_size
    with PILImage.open(result.path) as written:
        assert written.format == "WEBP"


def test_process_image_inside_never_enlarges(tmp_path):
    options = ImageOptions(width=1200, height=800, fit="inside", format="jpeg")

    result = process_image(make_image_bytes((300, 200), mode="RGBA"), tmp_path, options)

    assert (result.width, result.height) == (300, 200)
    assert result.mime_type == "image/jpeg"


def test_process_image_rejects_garbage(tmp_path):
    with pytest.raises(ImageProcessingError):
        process_image(b"definitely not an image", tmp_path)


def oversized_png_header(width: int, height: int) -> bytes:
    """A PNG that declares huge dimensions but carries no pixel data."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b"")


def test_process_image_rejects_decompression_bomb(tmp_path):
    with pytest.raises(ImageProcessingError):
        process_image(oversized_png_header(20000, 20000), tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_generate_thumbnail_is_square(tmp_path):
    result = generate_thumbnail(make_image_bytes((1000, 500)), tmp_path)

    assert (result.width, result.height) == (300, 300)


def test_create_responsive_images_writes_each_preset(tmp_path):
    results = create_responsive_images(make_image_bytes((2000, 2000)), tmp_path)

    assert set(results) == {"original", "large", "medium", "small", "thumbnail"}
    assert (results["medium"].width, results["medium"].height) == (800, 600)
    assert len({r.filename.split("-", 1)[1] for r in results.values()}) == 1


# =============================================================================
# Upload service
# =============================================================================


def upload(name="photo.png", content_type="image/png", data=None) -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, data=data or make_image_bytes())


def test_upload_appends_after_highest_sort_order(test_session, cache, upload_dir, make_pipe, make_image):
    pipe = make_pipe()
    make_image(pipe, filename="existing.webp", sort_order=4)

    result = image_service.upload_images(
        test_session, cache, pipe.id, "pipe", [upload("a.png"), upload("b.png")], alt_text="Front view"
    )

    assert result["message"] == "Successfully uploaded 2 image(s)"
    assert [i["sort_order"] for i in result["images"]] == [5, 6]
    assert all(i["alt_text"] == "Front view" for i in result["images"])
    assert all((upload_dir / i["filename"]).exists() for i in result["images"])


def test_upload_skips_undecodable_files(test_session, cache, make_pipe):
    pipe = make_pipe()

    result = image_service.upload_images(
        test_session, cache, pipe.id, "pipe", [upload("bad.png", data=b"nope"), upload("good.png")]
    )

    assert len(result["images"]) == 1
    assert result["images"][0]["original_name"] == "good.png"
    assert result["images"][0]["alt_text"] == "good.png"


def test_upload_with_no_processable_file_fails(test_session, cache, make_pipe):
    pipe = make_pipe()

    with pytest.raises(UploadFailedError) as exc_info:
        image_service.upload_images(test_session, cache, pipe.id, "pipe", [upload(data=b"nope")])

    assert exc_info.value.status_code == 500


def test_upload_skips_oversized_image(test_session, cache, make_pipe):
    pipe = make_pipe()

    result = image_service.upload_images(
        test_session,
        cache,
        pipe.id,
        "pipe",
        [upload("huge.png", data=oversized_png_header(20000, 20000)), upload("good.png")],
    )

    assert [i["original_name"] for i in result["images"]] == ["good.png"]


def test_upload_removes_written_files_when_batch_fails(test_session, cache, upload_dir, monkeypatch, make_pipe):
    pipe = make_pipe()
    real_process_image = image_service.process_image
    calls = []

    def process_then_crash(*args, **kwargs):
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return real_process_image(*args, **kwargs)

    monkeypatch.setattr(image_service, "process_image", process_then_crash)

    with pytest.raises(RuntimeError, match="disk full"):
        image_service.upload_images(test_session, cache, pipe.id, "pipe", [upload("a.png"), upload("b.png")])

    assert list(upload_dir.iterdir()) == []
    assert ImageRepository(test_session).for_item("pipe", pipe.id) == []


@pytest.mark.parametrize(
    "files,code",
    [
        ([], "NO_IMAGES"),
        ([upload(content_type="image/gif")], "INVALID_FILE_TYPE"),
        ([upload(data=b"x" * (5 * 1024 * 1024 + 1))], "FILE_TOO_LARGE"),
    ],
)
def test_upload_validation(test_session, cache, make_pipe, files, code):
    pipe = make_pipe()

    with pytest.raises(InvalidRequestError) as exc_info:
        image_service.upload_images(test_session, cache, pipe.id, "pipe", files)

    assert exc_info.value.code == code


def test_upload_rejects_too_many_files(test_session, cache, make_pipe):
    pipe = make_pipe()
    data = make_image_bytes((10, 10))

    with pytest.raises(InvalidRequestError) as exc_info:
        image_service.upload_images(test_session, cache, pipe.id, "pipe", [upload(data=data)] * 11)

    assert exc_info.value.code == "TOO_MANY_FILES"


def test_upload_to_unknown_item(test_session, cache):
    with pytest.raises(ItemNotFoundError):
        image_service.upload_images(test_session, cache, "missing", "pipe", [upload()])
    with pytest.raises(InvalidRequestError):
        image_service.upload_images(test_session, cache, "missing", "cigar", [upload()])


def test_upload_invalidates_item_detail(test_session, cache, make_pipe):
    pipe = make_pipe()
    assert catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)["images"] == []

    image_service.upload_images(test_session, cache, pipe.id, "pipe", [upload()])

    assert len(catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)["images"]) == 1


def test_delete_image_renumbers_remaining(test_session, cache, upload_dir, make_pipe, make_image):
    pipe = make_pipe()
    upload_dir.mkdir(parents=True)
    (upload_dir / "b.webp").write_bytes(b"x")
    make_image(pipe, filename="a.webp", sort_order=1)
    middle = make_image(pipe, filename="b.webp", sort_order=2)
    make_image(pipe, filename="c.webp", sort_order=3)

    image_service.delete_image(test_session, cache, middle.id)

    remaining = ImageRepository(test_session).for_item("pipe", pipe.id)
    assert [(i.filename, i.sort_order) for i in remaining] == [("a.webp", 1), ("c.webp", 2)]
    assert not (upload_dir / "b.webp").exists()


def test_reorder_and_feature_image(test_session, cache, make_pipe, make_image):
    pipe = make_pipe()
    image = make_image(pipe)

    reordered = image_service.reorder_image(test_session, cache, image.id, 7)
    featured = image_service.toggle_featured(test_session, cache, image.id, True)

    assert reordered["image"]["sort_order"] == 7
    assert featured["image"]["is_featured"] is True
    with pytest.raises(InvalidRequestError):
        image_service.reorder_image(test_session, cache, image.id, 0)
    with pytest.raises(ItemNotFoundError):
        image_service.toggle_featured(test_session, cache, "missing", True)


def test_gallery_edits_invalidate_item_and_lists(test_session, cache, fake_redis, make_pipe, make_image):
    pipe = make_pipe()
    image = make_image(pipe)
    catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)
    catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())
    assert f"pipe:{pipe.id}" in fake_redis.live_keys()

    image_service.reorder_image(test_session, cache, image.id, 3)

    assert not any(key == f"pipe:{pipe.id}" or key.startswith("pipes:") for key in fake_redis.live_keys())
    assert catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)["images"][0]["sort_order"] == 3
