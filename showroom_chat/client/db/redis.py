from redis import Redis

import showroom_chat.config.config as configs


def build_redis_client() -> Redis:
    return Redis(host=configs.REDIS_HOST, port=configs.REDIS_PORT, decode_responses=True)
