"""kcov coverage pipeline.

Builds kcov into a local staging directory, runs it against a prebuilt
test executable and uploads the resulting report to the hosted coverage
service. The package is the Python rendition of the CI coverage shell
step; ``python -m kcov_pipeline`` runs it with the default settings.
"""

from kcov_pipeline.config import PipelineConfig
from kcov_pipeline.errors import PipelineError
from kcov_pipeline.runner import CoveragePipeline

__all__: list[str] = ["CoveragePipeline", "PipelineConfig", "PipelineError"]
