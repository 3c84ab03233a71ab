"""
图片资源解析器单元测试
"""

from pathlib import Path

import pytest

from mdcarousel.interfaces import AssetResolutionError
from mdcarousel.render import AssetResolver
from mdcarousel.render.asset_resolver import decode_data_uri, guess_content_type


@pytest.fixture
def public_dir(temp_dir: Path, png_bytes: bytes) -> Path:
    uploads = temp_dir / "public" / "uploads"
    uploads.mkdir(parents=True)
    (uploads / "pic.png").write_bytes(png_bytes)
    (uploads / "photo.JPG").write_bytes(b"jpeg-bytes")
    (temp_dir / "secret.txt").write_text("secret", encoding="utf-8")
    return temp_dir / "public"


@pytest.fixture
def resolver(public_dir: Path) -> AssetResolver:
    return AssetResolver(public_dir, asset_base_url="http://assets.carousel.local/")


class TestContentType:
    """类型推断测试"""

    def test_known_extensions(self):
        assert guess_content_type("/uploads/a.png") == "image/png"
        assert guess_content_type("/uploads/a.JPEG") == "image/jpeg"
        assert guess_content_type("/uploads/a.gif") == "image/gif"

    def test_unknown_defaults_to_jpeg(self):
        assert guess_content_type("/uploads/a.webp") == "image/jpeg"
        assert guess_content_type("/uploads/noext") == "image/jpeg"


class TestDataUri:
    """data: 地址解码测试"""

    def test_base64(self, png_data_uri: str, png_bytes: bytes):
        asset = decode_data_uri(png_data_uri)
        assert asset.content_type == "image/png"
        assert asset.body == png_bytes

    def test_percent_encoded(self):
        asset = decode_data_uri("data:image/svg+xml,%3Csvg%2F%3E")
        assert asset.content_type == "image/svg+xml"
        assert asset.body == b"<svg/>"

    def test_malformed(self):
        with pytest.raises(AssetResolutionError):
            decode_data_uri("data:image/png;base64")
        with pytest.raises(AssetResolutionError):
            decode_data_uri("data:image/png;base64,@@@")


class TestAssetResolver:
    """解析器测试"""

    @pytest.mark.asyncio
    async def test_resolve_data_uri(self, resolver: AssetResolver, png_data_uri: str, png_bytes: bytes):
        asset = await resolver.resolve(png_data_uri)
        assert asset is not None
        assert asset.body == png_bytes

    @pytest.mark.asyncio
    async def test_resolve_upload_path(self, resolver: AssetResolver, png_bytes: bytes):
        asset = await resolver.resolve("/uploads/pic.png")
        assert asset is not None
        assert asset.content_type == "image/png"
        assert asset.body == png_bytes

    @pytest.mark.asyncio
    async def test_resolve_asset_host_url(self, resolver: AssetResolver):
        """测试资源基址下的上传路径（由 <base href> 补全的地址）"""
        asset = await resolver.resolve("http://assets.carousel.local/uploads/photo.JPG")
        assert asset is not None
        assert asset.content_type == "image/jpeg"
        assert asset.body == b"jpeg-bytes"

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, resolver: AssetResolver):
        with pytest.raises(AssetResolutionError):
            await resolver.resolve("/uploads/missing.png")

    @pytest.mark.asyncio
    async def test_path_traversal_rejected(self, resolver: AssetResolver):
        with pytest.raises(AssetResolutionError):
            await resolver.resolve("/uploads/../../secret.txt")
        with pytest.raises(AssetResolutionError):
            await resolver.resolve("/uploads/%2E%2E/%2E%2E/secret.txt")

    @pytest.mark.asyncio
    async def test_asset_host_outside_uploads(self, resolver: AssetResolver):
        with pytest.raises(AssetResolutionError):
            await resolver.resolve("http://assets.carousel.local/style.css")

    @pytest.mark.asyncio
    async def test_other_scheme_passthrough(self, resolver: AssetResolver):
        assert await resolver.resolve("https://example.com/a.png") is None
        assert await resolver.resolve("about:blank") is None

    def test_is_local_without_asset_host(self, public_dir: Path):
        resolver = AssetResolver(public_dir)
        assert resolver.is_local("/uploads/a.png")
        assert not resolver.is_local("http://assets.carousel.local/uploads/a.png")
