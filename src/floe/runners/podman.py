"""Podman runner - Runs task images with the podman CLI."""

from .docker import DockerRunner

# podman global flags accepted as runner options
GLOBAL_OPTIONS = {
    "root": "--root",
    "runroot": "--runroot",
    "storage_driver": "--storage-driver",
    "log_level": "--log-level",
}


class PodmanRunner(DockerRunner):
    """
    Run ``docker://image`` resources with ``podman run --rm``.

    Accepts the DockerRunner options plus podman's storage flags
    (root, runroot, storage_driver, log_level).
    """

    executable = "podman"

    def global_options(self) -> list[str]:
        args = []
        for option, flag in GLOBAL_OPTIONS.items():
            if value := self.options.get(option):
                args += [flag, value]
        return args
