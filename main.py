#!/usr/bin/env python3
"""
AI Style Image Generator - Main Entry Point

Runs the API server, or talks to it as a client: account management,
image generation and the personal gallery.

Usage:
    python main.py serve --reload
    python main.py signup --email a@example.com --password secret1 --name "Ada"
    python main.py signin --email a@example.com --password secret1
    python main.py generate "a red bicycle" --style anime
    python main.py gallery list
    python main.py gallery download <generation-id>
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.client.api_client import GeneratorApiClient
from src.client.auth_flow import SIGN_UP, AuthFlow
from src.client.gallery import Gallery, RefreshSignal
from src.client.session import SessionState
from src.client.submission import SubmissionForm
from src.core.auth_client import AuthClient
from src.core.config import ClientConfig, SupabaseConfig
from src.core.errors import AppError
from src.core.prompts import DEFAULT_STYLE, STYLE_PRESETS, STYLE_VALUES


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate styled images from prompts and manage your gallery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --port 8000
  %(prog)s signin --email a@example.com --password secret1
  %(prog)s generate "a lighthouse at dusk" --style watercolor
  %(prog)s generate "make it glow" --image photo.png
  %(prog)s gallery delete 9b2f4f8e-2f7a-4a8e-9d0e-8f0e5c1d2a3b
        """
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    for name, help_text in (("signin", "Sign in to your account"), ("signup", "Create an account")):
        auth = subparsers.add_parser(name, help=help_text)
        auth.add_argument("--email", required=True)
        auth.add_argument("--password", required=True)
        if name == "signup":
            auth.add_argument("--name", required=True, help="Full name")

    subparsers.add_parser("signout", help="Sign out and forget the stored session")
    subparsers.add_parser("whoami", help="Show the signed-in user and profile")
    subparsers.add_parser("styles", help="List the available style presets")

    generate = subparsers.add_parser("generate", help="Generate an image from a prompt")
    generate.add_argument("prompt", help="What to draw")
    generate.add_argument(
        "--style", "-s",
        choices=STYLE_VALUES,
        default=DEFAULT_STYLE,
        help=f"Style preset (default: {DEFAULT_STYLE})"
    )
    generate.add_argument(
        "--image", "-i",
        type=Path,
        help="Reference image to edit (jpg, png or webp, max 10MB)"
    )

    gallery = subparsers.add_parser("gallery", help="Browse your generations")
    gallery_actions = gallery.add_subparsers(dest="action", required=True)
    gallery_actions.add_parser("list", help="List your 20 newest generations")
    delete = gallery_actions.add_parser("delete", help="Delete a generation")
    delete.add_argument("generation_id")
    download = gallery_actions.add_parser("download", help="Save a generation's image")
    download.add_argument("generation_id")
    download.add_argument("--output-dir", "-o", type=Path, help="Target directory")

    return parser


def run_server(args) -> int:
    import uvicorn

    uvicorn.run("src.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def print_generation(item: dict) -> None:
    image = "yes" if item.get("image_url") else "no"
    print(f"{item['id']}  {item['status']:<9}  {item['style']:<12}  image={image}  {item['prompt'][:60]}")


async def run_client(args, config: ClientConfig) -> int:
    auth_client = AuthClient(SupabaseConfig())
    session_state = SessionState(auth_client, config.session_file)
    api = GeneratorApiClient(config.api_url, lambda: session_state.access_token)
    await session_state.start()

    try:
        if args.command in ("signin", "signup"):
            flow = AuthFlow(auth_client, session_state, redirect_url=config.redirect_url)
            if flow.should_redirect():
                print(f"Already signed in as {session_state.user.email}")
                return 0
            if args.command == "signup":
                flow.toggle_mode()
            outcome = await flow.submit(
                args.email, args.password, getattr(args, "name", None) if flow.mode == SIGN_UP else None
            )
            print(outcome.message, file=sys.stdout if outcome.success else sys.stderr)
            return 0 if outcome.success else 1

        if args.command == "signout":
            outcome = await AuthFlow(auth_client, session_state).sign_out()
            print(outcome.message, file=sys.stdout if outcome.success else sys.stderr)
            return 0 if outcome.success else 1

        if args.command == "whoami":
            user = await session_state.get_user()
            if user is None:
                print("Not signed in", file=sys.stderr)
                return 1
            profile = await api.get_profile()
            print(f"{user.email} ({user.id})")
            print(f"Plan: {profile['subscription_plan']}  Credits: {profile['generation_credits']}")
            return 0

        if args.command == "generate":
            signal = RefreshSignal()
            form = SubmissionForm(api, session_state, signal)
            outcome = await form.submit(args.prompt, args.style, args.image)
            print(outcome.message, file=sys.stdout if outcome.success else sys.stderr)
            if outcome.success:
                print(f"Generation: {outcome.generation_id}")
            return 0 if outcome.success else 1

        if args.command == "gallery":
            gallery = Gallery(api)
            items = await gallery.refresh()
            if args.action == "list":
                if not items:
                    print("No generations yet")
                for item in items:
                    print_generation(item)
                return 0

            if args.action == "delete":
                await gallery.delete(args.generation_id)
                print("Generation deleted")
                return 0

            if args.action == "download":
                generation = next(
                    (item for item in items if item["id"] == args.generation_id), None
                ) or await api.get_generation(args.generation_id)
                target = await gallery.download(generation, args.output_dir or config.download_dir)
                print(f"Image downloaded: {target}")
                return 0

    except AppError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        session_state.stop()
        await api.close()
        await auth_client.close()

    return 1


def main():
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "serve":
        return run_server(args)

    if args.command == "styles":
        for preset in STYLE_PRESETS:
            marker = " (default)" if preset.value == DEFAULT_STYLE else ""
            print(f"{preset.value:<14} {preset.label}{marker}")
        return 0

    return asyncio.run(run_client(args, ClientConfig()))


if __name__ == "__main__":
    sys.exit(main())
