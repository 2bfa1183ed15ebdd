import asyncio

from groq import Groq

from roadmapper.ai_engine import generate_roadmap
from roadmapper.core.config import settings
from roadmapper.core.errors import RoadmapError


def list_models() -> None:
    print("🔌 Connecting to Groq...")
    client = Groq(api_key=settings.GROQ_API_KEY)
    models = client.models.list()
    print("\n✅ Connected. Available models:")
    print("-" * 40)
    for model in models.data:
        marker = "🌟" if model.id == settings.GROQ_MODEL else "  "
        print(f"{marker} {model.id}")
    print("-" * 40)


async def smoke_test() -> None:
    print(f"\n🧪 Generating a beginner roadmap with {settings.GROQ_MODEL}...")
    nodes = await generate_roadmap("Python", "beginner", "week-by-week")
    for node in nodes:
        print(f"  {node.title}  ({node.time_needed}h) -> {node.children}")
    print(f"🚀 {len(nodes)} nodes received")


if __name__ == "__main__":
    if not settings.GROQ_API_KEY:
        print("❌ GROQ_API_KEY is not set (.env or environment)")
        raise SystemExit(1)
    try:
        list_models()
        asyncio.run(smoke_test())
    except RoadmapError as e:
        print(f"\n💣 Generation failed [{e.kind.value}]: {e.message}")
        raise SystemExit(1)
