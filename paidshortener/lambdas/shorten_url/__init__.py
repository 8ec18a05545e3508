from paidshortener.utils import initialize_logging


initialize_logging()
