"""Quick start example for the Youdu app SDK.

This example demonstrates how to:
1. Create a client from configuration
2. Send different types of messages
3. Receive callbacks from the Youdu server
"""

import time

from youdu_app import (
    CallbackServer,
    ExLink,
    MpNews,
    ReceivedMessage,
    YouduClient,
    YouduConfig,
    setup_logging,
)


def example_send_messages(client: YouduClient):
    """Example: Send different types of messages."""
    client.get_token()

    # 1. Send simple text message
    print("Sending text message...")
    client.send_text("Hello from youdu-app! 👋", to_user="sa08")

    # 2. Upload an image and send it
    print("Sending image message...")
    client.send_image_path("logo.png", to_user="sa08")

    # 3. Rich articles; the cover image is uploaded because media_id is empty
    print("Sending mpnews message...")
    client.send_mpnews(
        [
            MpNews(
                title="Release notes",
                digest="What changed this week",
                content="<p>New callback server</p>",
                path="cover.jpg",
                show_front=1,
            )
        ],
        to_user="sa08",
    )

    # 4. External links
    print("Sending exlink message...")
    client.send_exlink(
        [ExLink(title="Youdu", url="https://youdu.im", digest="Enterprise IM", path="cover.jpg")],
        to_dept="1",
    )


def example_receive_messages(client: YouduClient):
    """Example: Print every message pushed to the callback URL."""

    def on_message(message: ReceivedMessage) -> None:
        print(f"[{message.package_id}] {message.from_user}: {message.content}")

    server = CallbackServer(client.codec, handler=on_message)
    server.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        server.stop()


if __name__ == "__main__":
    # Reads YOUDU_APP_BUIN, YOUDU_APP_APP_ID, YOUDU_APP_AES_KEY and
    # YOUDU_APP_SERVER_ADDR from the environment or a .env file
    config = YouduConfig()  # type: ignore[call-arg]
    setup_logging(config.logging)

    with YouduClient.from_config(config) as youdu:
        example_send_messages(youdu)
        example_receive_messages(youdu)
