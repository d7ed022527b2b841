from .chat_message import ChatMessage
from .chat_question import ChatQuestion
from .chat_session import ChatSession
from .vehicle import Shop, Vehicle, VehiclePhoto

__all__ = ["ChatMessage", "ChatQuestion", "ChatSession", "Shop", "Vehicle", "VehiclePhoto"]
