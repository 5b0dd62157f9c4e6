from . import healthcheck as healthcheck
