"""
Example: Datapoint memory for a smart home

Demonstrates:
1. Ingesting datapoint state changes (with dedup and rate limiting)
2. Resolving free-text device names to datapoint IDs
3. Building RAG context and answering from it
4. Applying retention

Runs against an in-memory vector store and a local Ollama server for
embeddings. Install required dependencies:
    pip install datapoint-memory[embeddings-openai]

Pull an embedding model first:
    ollama pull nomic-embed-text
"""

import asyncio
import logging
import os

from datapoint_memory import DatapointMemoryConfig, DatapointMemoryService
from datapoint_memory.config import RetentionPolicy
from datapoint_memory.storage import InMemoryDatapointStore

OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434/v1")

DATAPOINTS = {
    "0_userdata.0.Anwesenheit_Martin": {
        "enabled": True,
        "allowAutoChange": True,
        "description": "Martin ist",
        "location": "Zuhause",
        "dataType": "boolean",
        "booleanTrueValue": "anwesend",
        "booleanFalseValue": "abwesend",
    },
    "hm-rpc.0.Wohnzimmer.Temperatur": {
        "enabled": True,
        "description": "Temperatur",
        "location": "Wohnzimmer",
        "dataType": "number",
        "units": "°C",
    },
    "0_userdata.0.Wasser.Zaehlerstand": {
        "enabled": True,
        "description": "Zählerstand",
        "location": "Zuhause",
        "dataType": "number",
        "units": "l",
    },
}


async def main():
    from datapoint_memory.embeddings import OpenAIEmbedding

    embedding = OpenAIEmbedding(model="nomic-embed-text", base_url=OLLAMA_URL)
    service = DatapointMemoryService(InMemoryDatapointStore(), embedding, DatapointMemoryConfig())

    service.update_allowed(
        readable=DATAPOINTS.keys(),
        writable=[dp_id for dp_id, custom in DATAPOINTS.items() if custom.get("allowAutoChange")],
    )

    print("\n=== Ingestion ===")
    values = {
        "0_userdata.0.Anwesenheit_Martin": True,
        "hm-rpc.0.Wohnzimmer.Temperatur": 21.5,
        "0_userdata.0.Wasser.Zaehlerstand": 1250,
    }
    for datapoint_id, value in values.items():
        result = await service.ingest(datapoint_id, {"val": value}, DATAPOINTS[datapoint_id])
        print(f"{datapoint_id}: stored={result.stored} ({result.reason})")

    # Identical value again: dropped by the dedup window
    temperature_id = "hm-rpc.0.Wohnzimmer.Temperatur"
    result = await service.ingest(temperature_id, {"val": 21.5}, DATAPOINTS[temperature_id])
    print(f"Repeated temperature: stored={result.stored} ({result.reason})")

    print("\n=== Resolution ===")
    for query in ["Anwesenheit Martin", "temperatur", "Wasserzähler"]:
        print(f"{query!r} -> {await service.resolve(query)}")

    print("\n=== Context ===")
    print(await service.build_context("Wie warm ist es im Wohnzimmer?"))

    print("\n=== Answer (context fallback without chat model) ===")
    print(await service.answer("Ist Martin zuhause?"))

    print("\n=== Retention ===")
    result = await service.prune_all(policy=RetentionPolicy(max_entries=1))
    print(f"Processed {result.processed} datapoints, removed {result.removed} entries")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
