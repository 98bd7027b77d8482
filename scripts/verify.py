import httpx
import asyncio
import os
import uuid

BASE_URL = os.environ.get("BASE_URL", "http://localhost:8000")

async def run_verification():
    print(f"Starting verification against {BASE_URL}...\n")
    headers = {"X-User-Id": "verifier"}

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /health...")
        try:
            resp = await client.get("/health")
        except httpx.HTTPError as e:
            print(f"   FAIL  Connection Error: {e}")
            return
        if resp.status_code != 200 or resp.json() != {"status": "ok"}:
            print(f"   FAIL  Health Check Failed: {resp.text}")
            return
        print("   OK    Health Check Passed")

        # 2. Generated alias
        print("\n2. [API] Creating short link with generated alias...")
        resp = await client.post("/v1/links", json={"long_link": "https://www.example.com"}, headers=headers)
        if resp.status_code == 201:
            print(f"   OK    Created: {resp.json()['short_link']}")
        else:
            print(f"   FAIL  Create Failed: {resp.status_code} {resp.text}")
            return

        # 3. Custom alias, then the same alias again
        print("\n3. [API] Creating short link with custom alias...")
        alias = f"verify-{uuid.uuid4().hex[:8]}"
        payload = {"long_link": "https://www.example.com", "custom_alias": alias}
        first = await client.post("/v1/links", json=payload, headers=headers)
        second = await client.post("/v1/links", json=payload, headers=headers)
        if first.status_code == 201 and second.status_code == 409:
            print(f"   OK    Alias {alias} created once, duplicate rejected")
        else:
            print(f"   FAIL  Got {first.status_code} then {second.status_code}")

        # 4. Validation
        print("\n4. [API] Verifying validation errors...")
        resp = await client.post("/v1/links", json={"long_link": "not-a-url"}, headers=headers)
        if resp.status_code == 400 and resp.json()["error"]["code"] == "INVALID_LONG_LINK":
            print("   OK    Invalid long link rejected")
        else:
            print(f"   FAIL  Validation Failed: {resp.status_code} {resp.text}")

        # 5. Metrics
        print("\n5. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "short_links_created_total" in resp.text:
            print("   OK    Metrics Endpoint Exposed")
        else:
            print(f"   FAIL  Metrics Failed: {resp.status_code}")

    print("\nVerification Complete!")

if __name__ == "__main__":
    asyncio.run(run_verification())
