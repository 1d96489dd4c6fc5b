from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from learnace.main import app
from learnace.storage import LocalStorage, MemoryStore, get_storage


@pytest.fixture
def storage():
	return LocalStorage(MemoryStore())


@pytest.fixture
def client(storage):
	app.dependency_overrides[get_storage] = lambda: storage
	try:
		yield TestClient(app)
	finally:
		app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
	buf = BytesIO()
	Image.new("RGB", (8, 8), color="white").save(buf, format="PNG")
	return buf.getvalue()
