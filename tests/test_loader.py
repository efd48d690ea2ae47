import httpx
import pytest

from modules.loader import BlobStore, ImageLoader, LoadFailed, Loaded
from utils.exceptions import ImageLoadError


@pytest.mark.asyncio
async def test_load_data_url(make_data_url) -> None:
    result = await ImageLoader().load(make_data_url((10, 20, 30), (64, 48)))

    assert isinstance(result, Loaded)
    assert result.image.size == (64, 48)
    assert result.image.mode == "RGBA"
    assert result.image.getpixel((0, 0)) == (10, 20, 30, 255)


@pytest.mark.asyncio
async def test_load_http_via_transport(make_png) -> None:
    png = make_png((0, 0, 255), (32, 32))

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/ok.png":
            return httpx.Response(200, content=png, headers={"content-type": "image/png"})
        return httpx.Response(404)

    loader = ImageLoader(transport=httpx.MockTransport(handler))

    ok = await loader.load("https://images.example.com/ok.png")
    assert isinstance(ok, Loaded)
    assert ok.image.getpixel((5, 5)) == (0, 0, 255, 255)

    missing = await loader.load("https://images.example.com/missing.png")
    assert isinstance(missing, LoadFailed)
    assert "404" in missing.reason


@pytest.mark.asyncio
async def test_load_local_path(tmp_path, make_png) -> None:
    path = tmp_path / "base.png"
    path.write_bytes(make_png((1, 2, 3), (8, 8)))
    loader = ImageLoader()

    assert isinstance(await loader.load(str(path)), Loaded)
    assert isinstance(await loader.load(path.as_uri()), Loaded)
    assert isinstance(await loader.load(str(tmp_path / "nope.png")), LoadFailed)


@pytest.mark.asyncio
async def test_load_failures_never_raise() -> None:
    loader = ImageLoader()

    for ref in ["", "data:image/png;base64,AAAA", "data:nocomma", "ftp://example.com/a.png", "blob:unknown"]:
        result = await loader.load(ref)
        assert isinstance(result, LoadFailed), ref


@pytest.mark.asyncio
async def test_fetch_bytes_raises_load_error() -> None:
    with pytest.raises(ImageLoadError):
        await ImageLoader().fetch_bytes("blob:revoked")


@pytest.mark.asyncio
async def test_blob_urls_are_readable_while_held(make_png) -> None:
    loader = ImageLoader()
    with loader.blobs.hold(make_png((9, 9, 9), (4, 4))) as url:
        assert url.startswith("blob:")
        result = await loader.load(url)
    assert isinstance(result, Loaded)
    assert len(loader.blobs) == 0


def test_blob_hold_releases_on_error() -> None:
    blobs = BlobStore()
    with pytest.raises(RuntimeError):
        with blobs.hold(b"data") as url:
            assert blobs.read(url) == b"data"
            raise RuntimeError("decode blew up")

    assert len(blobs) == 0
    with pytest.raises(ImageLoadError):
        blobs.read(url)


def test_loader_keeps_injected_empty_blob_store() -> None:
    blobs = BlobStore()
    assert ImageLoader(blobs=blobs).blobs is blobs
