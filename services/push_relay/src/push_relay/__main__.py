"""Dev entry point: python -m push_relay."""
from push_core.config import ExpoConfig
from push_core.delivery import ExpoPushClient, NotificationDispatcher

from push_relay.app import create_app
from push_relay.config import RelayConfig


def main() -> None:
    config = RelayConfig()
    expo_config = ExpoConfig()
    dispatcher = NotificationDispatcher(
        ExpoPushClient(expo_config), batch_size=expo_config.max_batch_size
    )
    app = create_app(dispatcher, config)
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
