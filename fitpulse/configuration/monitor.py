import logging
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter
from fitpulse.configuration.config import Config

# Attribute names whose values never leave the process
SECRET_KEYS = frozenset({"password", "confirm_password", "token", "authorization"})

logger = logging.getLogger("fitpulse")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

def monitoring_enabled() -> bool:
    """Spans are only exported when an Application Insights connection string is set."""
    return bool(Config.APPLICATIONINSIGHTS_CONNECTION_STRING)

def scrub(properties):
    """Copy of the properties with secret values masked."""
    if not properties:
        return {}
    return {
        key: "***" if key.lower() in SECRET_KEYS else value
        for key, value in properties.items()
    }

def setup_tracing():
    """
    Install the tracer provider for the FitPulse client.

    With a connection string, spans go to Azure Monitor and outgoing httpx
    calls to the backend are traced as well.
    """
    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: Config.SERVICE_NAME}))
    trace.set_tracer_provider(provider)

    if monitoring_enabled():
        try:
            exporter = AzureMonitorTraceExporter(
                connection_string=Config.APPLICATIONINSIGHTS_CONNECTION_STRING
            )
            provider.add_span_processor(BatchSpanProcessor(exporter))
            HTTPXClientInstrumentor().instrument()
            logger.info("Tracing exported to Azure Monitor")
        except Exception as e:
            logger.error(f"Azure Monitor export disabled: {str(e)}")

    return trace.get_tracer("fitpulse")

tracer = setup_tracing()

def instrument_fastapi(app):
    """Trace incoming requests of the web app when monitoring is on."""
    if not monitoring_enabled():
        return
    try:
        FastAPIInstrumentor.instrument_app(app)
    except Exception as e:
        logger.error(f"FastAPI instrumentation failed: {str(e)}")

def start_span(name, context=None, kind=None, attributes=None):
    return tracer.start_as_current_span(name, context=context, kind=kind, attributes=scrub(attributes))

def _annotate(span, properties):
    for key, value in scrub(properties).items():
        span.set_attribute(key, str(value))

def log_event(event_name, properties=None):
    """Record a named event as a span and an INFO log line."""
    try:
        with tracer.start_as_current_span(event_name) as span:
            _annotate(span, properties)
        logger.info(f"Event: {event_name}", extra={"custom_properties": scrub(properties)})
    except Exception as e:
        logger.error(f"Failed to log event '{event_name}': {str(e)}")

def log_warning(message, properties=None):
    """Log a recoverable problem that did not interrupt the operation."""
    logger.warning(message, extra={"custom_properties": scrub(properties)})

def log_exception(exception, properties=None):
    """Record a failed operation; callers re-raise afterwards."""
    try:
        with tracer.start_as_current_span("exception") as span:
            span.record_exception(exception)
            _annotate(span, properties)
            span.set_status(trace.StatusCode.ERROR, str(exception))
        logger.error(f"Exception: {str(exception)}", exc_info=exception,
                     extra={"custom_properties": scrub(properties)})
    except Exception as e:
        logger.error(f"Failed to log exception: {str(e)}")

def log_metric(metric_name, value, properties=None):
    try:
        with tracer.start_as_current_span(f"metric:{metric_name}") as span:
            span.set_attribute("metric.value", value)
            _annotate(span, properties)
        logger.info(f"Metric: {metric_name}={value}", extra={"custom_properties": scrub(properties)})
    except Exception as e:
        logger.error(f"Failed to log metric '{metric_name}': {str(e)}")
