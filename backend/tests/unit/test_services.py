"""
上传存储与内容生成单元测试
"""

from pathlib import Path

import pytest

from mdcarousel.interfaces import UploadError, ValidationError
from mdcarousel.services import ContentGenerator, UploadStore


@pytest.fixture
def store(temp_dir: Path) -> UploadStore:
    return UploadStore(temp_dir / "public" / "uploads")


class TestUploadStore:
    """上传存储测试"""

    @pytest.mark.asyncio
    async def test_save_image(self, store: UploadStore, png_bytes: bytes, png_data_uri: str):
        result = await store.save("photo.PNG", "image/png", png_bytes)

        assert result.url == png_data_uri
        assert result.path.startswith("/uploads/")
        assert result.path.endswith(".png")
        assert result.size == len(png_bytes)
        saved = store.uploads_dir / result.path.rsplit("/", 1)[1]
        assert saved.read_bytes() == png_bytes

    @pytest.mark.asyncio
    async def test_unique_names(self, store: UploadStore, png_bytes: bytes):
        a = await store.save("a.png", "image/png", png_bytes)
        b = await store.save("a.png", "image/png", png_bytes)
        assert a.path != b.path

    @pytest.mark.asyncio
    async def test_extension_from_content_type(self, store: UploadStore):
        result = await store.save(None, "image/gif", b"GIF89a")
        assert result.path.endswith(".gif")

    @pytest.mark.asyncio
    async def test_extension_follows_content_type(self, store: UploadStore, png_bytes: bytes):
        """测试文件名后缀与类型不符时以类型为准"""
        result = await store.save("x.html", "image/png", png_bytes)
        assert result.path.endswith(".png")
        assert not list(store.uploads_dir.glob("*.html"))

        jpeg = await store.save("photo.jpeg", "image/jpeg", b"jpeg-bytes")
        assert jpeg.path.endswith(".jpeg")
        renamed = await store.save("photo.png", "image/jpeg", b"jpeg-bytes")
        assert renamed.path.endswith(".jpg")

    @pytest.mark.asyncio
    async def test_receive_reads_bounded(self, store: UploadStore):
        """测试读取上传流时最多读取上限+1字节"""

        class Upload:
            filename = "big.png"
            content_type = "image/png"

            def __init__(self):
                self.sizes: list[int] = []

            async def read(self, size: int = -1) -> bytes:
                self.sizes.append(size)
                return b"\0" * size

        upload = Upload()
        with pytest.raises(UploadError, match="5MB"):
            await store.receive(upload)
        assert upload.sizes == [store.max_bytes + 1]
        assert not store.uploads_dir.exists() or not list(store.uploads_dir.iterdir())

    def test_reject_non_image(self, store: UploadStore):
        with pytest.raises(UploadError, match="文件必须是图片"):
            store.validate("text/plain", 10)

    def test_reject_oversize(self, store: UploadStore):
        with pytest.raises(UploadError, match="5MB"):
            store.validate("image/png", 5 * 1024 * 1024 + 1)
        store.validate("image/png", 5 * 1024 * 1024)

    def test_reject_empty(self, store: UploadStore):
        with pytest.raises(UploadError, match="未上传文件"):
            store.validate("image/png", 0)

    def test_from_config(self, runtime_config):
        store = UploadStore.from_config(runtime_config)
        assert store.uploads_dir == runtime_config.storage.uploads_dir
        assert store.max_bytes == 5 * 1024 * 1024


class TestContentGenerator:
    """内容生成测试"""

    def test_generate_two_pages(self):
        content = ContentGenerator().generate("  旅行清单 ")
        assert content.startswith("# 旅行清单\n")
        assert "\n---\n" in content

    def test_empty_prompt(self):
        with pytest.raises(ValidationError):
            ContentGenerator().generate(" ")
