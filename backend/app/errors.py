"""Error taxonomy shared by services and routes.

Every error carries the HTTP status it maps to and a short, user-facing
reason. Internal detail is logged where the error is raised, never attached
here.
"""


class StoreError(Exception):
    status_code = 500
    default_message = "Error interno del servidor"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(StoreError):
    status_code = 400
    default_message = "Datos inválidos"


class TotalMismatch(StoreError):
    status_code = 400
    default_message = "Total no coincide con la suma de productos + envío"


class DuplicateReview(StoreError):
    status_code = 400
    default_message = "Ya has reseñado este producto"


class NotEligibleForReview(StoreError):
    status_code = 400
    default_message = "Solo puedes reseñar productos que hayas recibido"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "Usuario no autenticado"


class NotFound(StoreError):
    status_code = 404
    default_message = "Recurso no encontrado"


class EmptyCart(StoreError):
    status_code = 404
    default_message = "Carrito vacío o no encontrado"


class OutOfStock(StoreError):
    status_code = 409
    default_message = "Stock insuficiente"


class EstimatorUnavailable(StoreError):
    status_code = 500
    default_message = "Servicio de predicción no disponible"


class InvalidCaptureAmount(StoreError):
    status_code = 500
    default_message = "Monto inválido en respuesta de PayPal"


class PaymentGatewayError(StoreError):
    status_code = 500
    default_message = "Error al comunicarse con la pasarela de pago"


class Internal(StoreError):
    status_code = 500
