from .api import ApiClient, ApiError, CreatePaymentResponse, PaymentStatusResponse
from .flow import PaymentFlow, StatusPoller, FlowStateError, qr_code_url
