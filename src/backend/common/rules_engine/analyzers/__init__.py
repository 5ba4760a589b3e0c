from .consumer_support import ConsumerSupportAnalyzer
from .consumer_understanding import ConsumerUnderstandingAnalyzer
from .price_value import PriceValueAnalyzer
from .products_services import ProductsServicesAnalyzer

__all__ = [
    "ProductsServicesAnalyzer",
    "PriceValueAnalyzer",
    "ConsumerUnderstandingAnalyzer",
    "ConsumerSupportAnalyzer",
]
