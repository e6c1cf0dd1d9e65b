"""
Locust Load Test Suite

Point it at a staging sheet, never the live one: registrations are real rows.

Run scenarios:
  locust -f locustfile.py --tags contention   # Fight over one session's seats
  locust -f locustfile.py --tags browse       # Schedule + availability reads
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
from locust import HttpUser, task, between, tag, events

SEATS_PER_SESSION = 20

# Shared state, filled from the first schedule read
SESSIONS = []


def random_email():
    return f"load_{random.randint(10000, 99999)}@example.com"


def random_phone():
    return str(random.randint(80000000, 99999999))


def load_sessions(client):
    resp = client.get("/api/schedule")
    if resp.status_code != 200:
        return
    for date, times in resp.json().get("schedule", {}).items():
        for time in times:
            if (date, time) not in SESSIONS:
                SESSIONS.append((date, time))


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("Sessions are discovered from /api/schedule on first user start")
    print("=" * 60)


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - 100 users -> 20 seats of one session

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify in the Registrations sheet that no (date, time, seat)
    appears twice.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if not SESSIONS:
            load_sessions(self.client)

    @tag("contention")
    @task
    def book_random_seat(self):
        if not SESSIONS:
            return
        date, time = SESSIONS[0]
        with self.client.post("/api/register",
            json={
                "date": date,
                "time": time,
                "seat": random.randint(1, SEATS_PER_SESSION),
                "email": random_email(),
                "phone": random_phone(),
            },
            name="/api/register [contended]",
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409: someone got there first
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class BrowsingUser(HttpUser):
    """
    TEST 2: Reads - every request goes to the sheet (nothing is cached)

    Run: locust -f locustfile.py --tags browse -u 50 -r 10 --run-time 60s

    Watch sheet_store_latency_seconds on /metrics alongside P95/P99 here.
    """
    wait_time = between(0.5, 2)

    @tag("browse")
    @task(5)
    def read_schedule(self):
        load_sessions(self.client)

    @tag("browse")
    @task(10)
    def read_taken_seats(self):
        if SESSIONS:
            date, time = random.choice(SESSIONS)
            self.client.get("/api/register", params={"date": date, "time": time},
                name="/api/register?date&time")

    @tag("browse")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    Every reply must be the {status: "error"} envelope with a 4xx code.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes and resp.json().get("status") == "error":
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_time(self):
        with self.client.get("/api/register", params={"date": "2024-01-01"},
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def unknown_session(self):
        with self.client.post("/api/register",
            json={"date": "1999-01-01", "time": "00:00", "seat": 1,
                  "email": random_email(), "phone": random_phone()},
            catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def seat_out_of_range(self):
        with self.client.post("/api/register",
            json={"date": "2024-01-01", "time": "10:00", "seat": SEATS_PER_SESSION + 1,
                  "email": random_email(), "phone": random_phone()},
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def bad_email(self):
        with self.client.post("/api/register",
            json={"date": "2024-01-01", "time": "10:00", "seat": 1,
                  "email": "not-an-email", "phone": random_phone()},
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/register",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True
        ) as resp:
            self._expect(resp, [400])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic visitor flow

    Run: locust -f locustfile.py -u 100 -r 10 --run-time 120s

    Load schedule, poke at a few sessions, book a free seat now and then.
    """
    wait_time = between(1, 3)

    def on_start(self):
        load_sessions(self.client)

    @task(10)
    def browse_sessions(self):
        if SESSIONS:
            date, time = random.choice(SESSIONS)
            self.client.get("/api/register", params={"date": date, "time": time},
                name="/api/register?date&time")

    @task(2)
    def book_free_seat(self):
        if not SESSIONS:
            return
        date, time = random.choice(SESSIONS)
        resp = self.client.get("/api/register", params={"date": date, "time": time},
            name="/api/register?date&time")
        if resp.status_code != 200:
            return
        taken = set(resp.json().get("takenSeats", []))
        free = [s for s in range(1, SEATS_PER_SESSION + 1) if s not in taken]
        if free:
            self.client.post("/api/register", json={
                "date": date,
                "time": time,
                "seat": random.choice(free),
                "email": random_email(),
                "phone": random_phone(),
            })
