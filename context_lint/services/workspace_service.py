"""Сервис поиска пакетов Cargo-воркспейса."""

import json
import logging
import os
import subprocess
from dataclasses import dataclass, asdict
from pathlib import Path

from context_lint.errors import DiscoveryError

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Корень воркспейса и директории его пакетов."""

    root: str
    package_dirs: list[str]

    def to_dict(self) -> dict:
        """Преобразовать в словарь для JSON сериализации."""
        return asdict(self)


class WorkspaceService:
    """Определение набора директорий для проверки."""

    def __init__(self, cargo: str = "cargo"):
        """
        Инициализация сервиса.

        Args:
            cargo: путь к исполняемому файлу cargo
        """
        self.cargo = cargo

    def discover(self, manifest_path: str | None = None) -> Workspace:
        """
        Найти пакеты воркспейса через `cargo metadata`.

        Args:
            manifest_path: путь к Cargo.toml (по умолчанию - текущая директория)

        Returns:
            Workspace с корнем и директориями пакетов-участников
        """
        command = [self.cargo, "metadata", "--no-deps", "--format-version", "1"]
        if manifest_path:
            command.extend(["--manifest-path", manifest_path])

        location = manifest_path or os.getcwd()
        logger.info(f"[Workspace] Running cargo metadata for {location}")

        try:
            completed = subprocess.run(
                command, capture_output=True, text=True, check=False
            )
        except OSError as e:
            raise DiscoveryError(f"Running cargo metadata failed ({e})", location) from e

        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise DiscoveryError(f"cargo metadata failed: {stderr}", location)

        try:
            metadata = json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise DiscoveryError("Invalid cargo metadata output", location) from e

        return self.from_metadata(metadata, location)

    def from_metadata(self, metadata: dict, location: str = "<metadata>") -> Workspace:
        """Собрать Workspace из JSON `cargo metadata`."""
        try:
            root = metadata["workspace_root"]
            members = set(metadata.get("workspace_members", []))

            # Только пакеты-участники воркспейса
            package_dirs = {
                str(Path(package["manifest_path"]).parent)
                for package in metadata.get("packages", [])
                if package["id"] in members
            }
        except (KeyError, TypeError) as e:
            raise DiscoveryError(f"Unexpected cargo metadata layout ({e})", location) from e

        workspace = Workspace(root=root, package_dirs=sorted(package_dirs))
        logger.info(
            f"[Workspace] {len(workspace.package_dirs)} package directories under {root}"
        )
        return workspace

    def from_paths(self, paths: list[str]) -> Workspace:
        """
        Собрать Workspace из явно указанных директорий или файлов.

        Корень - общий родитель всех путей.
        """
        resolved = sorted({os.path.abspath(p) for p in paths})
        for path in resolved:
            if not os.path.exists(path):
                raise DiscoveryError("Path does not exist", path)

        root = os.path.commonpath(resolved)
        if os.path.isfile(root):
            root = os.path.dirname(root)

        logger.info(f"[Workspace] {len(resolved)} explicit paths under {root}")
        return Workspace(root=root, package_dirs=resolved)
