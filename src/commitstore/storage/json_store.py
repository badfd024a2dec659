"""JSON flat-file metadata store.

Entries live at ``<root>/<namespace>/<key>.json``. Writes go to a temporary
file in the same directory and are renamed into place, so readers never see
a half-written entry. Temporary files carry TEMP_SUFFIX so version control
can be told to ignore any left behind by an interrupted write.
"""

import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

from commitstore.core.errors import DecodeError, IOFailureError, NotFoundError
from commitstore.storage.base import MetadataStore

TEMP_SUFFIX = ".meta-tmp"


class JsonMetadataStore(MetadataStore):
    """Metadata store writing one pydantic model per JSON file."""

    scratch_patterns = (f"*{TEMP_SUFFIX}",)

    def path(self, root: Path, namespace: str, key: str) -> Path:
        return Path(root) / namespace / f"{key}.json"

    def write(self, root: Path, namespace: str, key: str, value: BaseModel) -> Path:
        target = self.path(root, namespace, key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{key}.", suffix=TEMP_SUFFIX)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value.model_dump_json(indent=2))
                    f.write("\n")
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise IOFailureError(
                f"Cannot write metadata for {key}: {e}", path=target, original_error=e
            ) from e
        return target

    def read(self, root: Path, namespace: str, key: str, out: BaseModel) -> None:
        source = self.path(root, namespace, key)
        try:
            data = source.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"No metadata for {key}", path=source, original_error=e) from e
        except OSError as e:
            raise IOFailureError(
                f"Cannot read metadata for {key}: {e}", path=source, original_error=e
            ) from e

        try:
            loaded = type(out).model_validate_json(data)
        except (ValidationError, UnicodeDecodeError) as e:
            raise DecodeError(
                f"Cannot decode metadata for {key}: {e}", path=source, original_error=e
            ) from e

        for field_name in type(out).model_fields:
            setattr(out, field_name, getattr(loaded, field_name))

    def delete(self, root: Path, namespace: str, key: str) -> Path:
        target = self.path(root, namespace, key)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"No metadata for {key}", path=target, original_error=e) from e
        except OSError as e:
            raise IOFailureError(
                f"Cannot remove metadata for {key}: {e}", path=target, original_error=e
            ) from e
        return target
