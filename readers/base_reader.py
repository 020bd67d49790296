#!/usr/bin/env python3
"""
Base Reader Module
Abstract interface for extracting rig data from scene files (USD, Maya ASCII)
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from core.rig_data import Skeleton, SkinBinding


class ExtractionError(ValueError):
    """Raised when a reader cannot produce a complete Skeleton or SkinBinding

    Attributes:
        reason: What went wrong
        source: File, prim path or node the failure relates to (optional)
    """

    def __init__(self, reason: str, source: Optional[str] = None):
        self.reason = reason
        self.source = source
        message = f"{reason}: {source}" if source else reason
        super().__init__(message)


class BaseReader(ABC):
    """Abstract base class for rig readers

    Provides a consistent interface for reading skeletons and skin bindings
    out of different scene formats. Readers either return fully populated
    structures or raise ExtractionError - never partial data.
    """

    def __init__(self, file_path: str, progress_callback=None):
        """Initialize reader with file path

        Args:
            file_path: Path to the scene file
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
        self.file_path = Path(file_path)
        self.progress_callback = progress_callback

    def log(self, message):
        """Send progress/status message"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'USD', 'Maya')"""
        pass

    @abstractmethod
    def list_skeletons(self) -> List[str]:
        """List identifiers of every skeleton in the file

        Returns:
            list: Skeleton prim paths (USD) or root joint names (Maya)
        """
        pass

    @abstractmethod
    def read_skeleton(self, identifier: str) -> Skeleton:
        """Extract one skeleton

        Args:
            identifier: Skeleton prim path (USD) or root joint name (Maya)

        Returns:
            Skeleton: Fully populated skeleton

        Raises:
            ExtractionError: If the skeleton cannot be read
        """
        pass

    @abstractmethod
    def list_skinned_geometry(self) -> List[str]:
        """List identifiers of every skinned geometry in the file"""
        pass

    @abstractmethod
    def read_skin_binding(self, geometry: str) -> SkinBinding:
        """Extract the skin binding of one geometry

        Args:
            geometry: Mesh prim path (USD) or mesh/transform name (Maya)

        Returns:
            SkinBinding: Fully populated skin binding

        Raises:
            ExtractionError: If the binding cannot be read
        """
        pass

    def read_all_skeletons(self) -> List[Skeleton]:
        """Extract every skeleton in the file, skipping unreadable ones

        Returns:
            list: Skeletons in listing order
        """
        skeletons = []
        for identifier in self.list_skeletons():
            try:
                skeletons.append(self.read_skeleton(identifier))
            except ExtractionError as e:
                self.log(f"Warning: Failed to parse skeleton at path {identifier}: {e.reason}")

        if not skeletons:
            self.log(f"Warning: No skeletons found in file: {self.file_path}")
        else:
            self.log(f"Found {len(skeletons)} skeleton(s) in file: {self.file_path}")
        return skeletons

    def _check_skeleton(self, skeleton: Skeleton) -> Skeleton:
        """Raise ExtractionError if a freshly built skeleton is inconsistent"""
        problems = skeleton.size_problems()
        if problems:
            raise ExtractionError(
                f"Inconsistent skeleton data ({'; '.join(problems)})", skeleton.path
            )
        return skeleton

    def _check_skin_binding(self, binding: SkinBinding) -> SkinBinding:
        """Raise ExtractionError if a freshly built skin binding is inconsistent"""
        problems = binding.size_problems()
        if problems:
            raise ExtractionError(
                f"Inconsistent skin binding data ({'; '.join(problems)})", binding.geometry_path
            )
        return binding
