"""
Configuration data models for todosync.

These models define the structure of ~/.config/todosync/config.json,
with validation and type safety via Pydantic.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StorageConfig(BaseModel):
    """
    Where task and project records live.

    The directory is the storage root handed to the VCS backend.
    """
    path: str = Field(
        default="~/.todosync",
        description="Storage root directory (~ is expanded)"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("storage.path cannot be empty")
        return v

    def resolved_path(self) -> Path:
        return Path(self.path).expanduser().resolve()


class VcsConfig(BaseModel):
    """Which version-control tool drives the storage root."""
    backend: Literal["git", "jj"] = Field(
        default="git",
        description="VCS backend: 'git' or 'jj'"
    )


class RemoteConfig(BaseModel):
    """Remote synchronization settings."""
    enable: bool = Field(
        default=False,
        description="Pull before and push after each commit"
    )
    name: str = Field(
        default="origin",
        min_length=1,
        description="Name of the remote to sync with"
    )


class GitConfig(BaseModel):
    """Settings used when vcs.backend is 'git'."""
    default_branch: str = Field(
        default="main",
        min_length=1,
        description="Branch created by init and pushed to the remote"
    )
    push_on_commit: bool = Field(
        default=True,
        description="Push after every commit when the remote is enabled"
    )
    remote: RemoteConfig = Field(default_factory=RemoteConfig)


class JjConfig(BaseModel):
    """Settings used when vcs.backend is 'jj'."""
    default_branch: str = Field(
        default="main",
        min_length=1,
        description="Bookmark advanced and pushed after each commit"
    )
    push_on_commit: bool = Field(
        default=True,
        description="Push after every commit when the remote is enabled"
    )
    colocate: bool = Field(
        default=False,
        description="Create a colocated .git directory next to .jj"
    )
    remote: RemoteConfig = Field(default_factory=RemoteConfig)


class TodosyncConfig(BaseModel):
    """
    Complete todosync configuration.

    Loaded with precedence: defaults < user config < env vars.
    """
    model_config = ConfigDict(extra="ignore")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    vcs: VcsConfig = Field(default_factory=VcsConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    jj: JjConfig = Field(default_factory=JjConfig)

    def active_section(self) -> GitConfig | JjConfig:
        """Settings block of the configured backend."""
        return self.git if self.vcs.backend == "git" else self.jj
