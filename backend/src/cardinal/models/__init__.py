from .models import DisplayQueue, PipelineStats
