"""
ASGI config for the Dropship Store API.

Served by Uvicorn/Daphne on a regular host, or wrapped by Mangum
when deployed behind API Gateway on AWS Lambda.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# Initialize Django at import time so Lambda pays the cost during container
# startup, not on the first request.
from django.core.asgi import get_asgi_application

application = get_asgi_application()


_lambda_handler = None


def lambda_handler(event, context):
    """
    AWS Lambda entry point for HTTP requests.

    lambda_handlers.api_handler wraps the same application with extra
    error handling; this is the minimal variant.
    """
    global _lambda_handler
    if _lambda_handler is None:
        from mangum import Mangum
        _lambda_handler = Mangum(application, lifespan="off")
    return _lambda_handler(event, context)
