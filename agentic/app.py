import asyncio
import logging
from typing import Optional

from agentic.core.config import Config
from agentic.core.users.directory import UserDirectory
from agentic.core.users.tools import UserTools
from agentic.skills.chat import ChatAgent


def configure_logging() -> None:
    logging.basicConfig(level=Config.LOG_LEVEL, format="[%(levelname)s] %(name)s: %(message)s")


def build_agent(directory: Optional[UserDirectory] = None) -> ChatAgent:
    """Wire directory -> tools -> chat agent (with its fallback)."""
    directory = directory or Config.get_user_directory()
    return ChatAgent(UserTools(directory))


async def ask(prompt: str, agent: Optional[ChatAgent] = None) -> str:
    agent = agent or build_agent()
    return await agent.converse(prompt)


async def repl(agent: ChatAgent) -> None:
    """Tiny REPL that sends each line to the agent."""
    print("\nAgentic Interactive Mode")
    print("Type a request in English or Arabic. Type 'quit' to exit.")

    while True:
        try:
            print("\n> ", end="", flush=True)
            # input in worker thread to keep event loop responsive
            user_input = await asyncio.to_thread(input)
            user_input = user_input.strip()

            if user_input.lower() in ["quit", "exit", "q"]:
                break

            if user_input:
                reply = await agent.converse(user_input)
                print(reply)

        except KeyboardInterrupt:
            break
        except EOFError:
            break


async def main() -> None:
    configure_logging()
    print("Starting Agentic...")
    Config.print_config()
    agent = build_agent()
    await repl(agent)
    print("Stopped.")


if __name__ == "__main__":
    asyncio.run(main())
