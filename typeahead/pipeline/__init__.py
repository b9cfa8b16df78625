from typeahead.pipeline.channel import QueryChannel
from typeahead.pipeline.search import PipelineState, SearchPipeline
from typeahead.pipeline.session import SearchSession

__all__ = [
    "PipelineState",
    "QueryChannel",
    "SearchPipeline",
    "SearchSession",
]
