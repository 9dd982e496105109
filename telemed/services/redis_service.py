# telemed/services/redis_service.py

import json
import redis
from typing import Any, AsyncIterator, Dict
from telemed.config.redis_config import get_redis_client, redis_config
import logging

logger = logging.getLogger("redis")

class RedisService:
    def __init__(self):
        self.redis_client: redis.Redis = get_redis_client()

    @staticmethod
    def chat_channel(appointment_id: int) -> str:
        return f"chat:{appointment_id}"

    def publish_chat_message(self, appointment_id: int, payload: Dict[str, Any]) -> bool:
        """Fan a stored message out to live subscribers. Subscribers that miss it refetch"""
        try:
            receivers = self.redis_client.publish(
                self.chat_channel(appointment_id),
                json.dumps(payload)
            )
            logger.debug(f"Published message to {receivers} subscriber(s) on chat:{appointment_id}")
            return True
        except redis.RedisError as e:
            logger.error(f"Error publishing chat message for appointment {appointment_id}: {e}")
            return False

    async def listen_chat(self, appointment_id: int) -> AsyncIterator[Dict[str, Any]]:
        client = redis_config.get_async_client()
        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(self.chat_channel(appointment_id))
            async for item in pubsub.listen():
                if item.get("type") != "message":
                    continue
                try:
                    yield json.loads(item["data"])
                except (TypeError, ValueError) as e:
                    logger.warning(f"Dropping malformed chat payload on chat:{appointment_id}: {e}")
        finally:
            try:
                await pubsub.unsubscribe(self.chat_channel(appointment_id))
            except redis.RedisError as e:
                logger.warning(f"Could not unsubscribe from chat:{appointment_id}: {e}")
            await pubsub.aclose()
            await client.aclose()


redis_service = RedisService()
