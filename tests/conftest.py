import pytest


@pytest.fixture
def write_catalog(tmp_path):
    def _write(name: str, *lines: str, directory=None):
        folder = directory or tmp_path
        path = folder / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write
