#!/usr/bin/env python3
"""
Automated smoke check for a running Benoît backend.
Walks home → free chat → message → lesson → home over HTTP and
verifies each mode switch resets the transcript.
"""

import sys

import requests

# Configuration
BACKEND_URL = "http://localhost:8000"


def check_health():
    """Check backend health endpoint"""
    print("🔍 Checking backend health...")
    try:
        response = requests.get(f"{BACKEND_URL}/health", timeout=5)
        assert response.status_code == 200
        assert response.text == "OK"
        print("✅ Backend health: OK")
        return True
    except Exception as e:
        print(f"❌ Backend health check failed: {e}")
        return False


def check_lessons():
    """Check lesson catalog endpoint"""
    print("\n🔍 Checking lesson catalog...")
    try:
        response = requests.get(f"{BACKEND_URL}/api/session/lessons", timeout=5)
        assert response.status_code == 200
        lessons = response.json()
        assert isinstance(lessons, list) and lessons

        for field in ["id", "title", "level", "description", "icon"]:
            assert field in lessons[0], f"Lesson missing field: {field}"
        print(f"✅ Lessons: {len(lessons)} available")
        print(f"   First lesson: {lessons[0]['icon']} {lessons[0]['title']} ({lessons[0]['level']})")
        return True
    except Exception as e:
        print(f"❌ Lesson catalog check failed: {e}")
        return False


def check_free_chat():
    """Start free chat and exchange one message"""
    print("\n🔍 Checking free chat...")
    try:
        state = requests.post(f"{BACKEND_URL}/api/session/chat", timeout=5).json()
        assert state["mode"] == "chat"
        assert len(state["messages"]) == 1, "Free chat should start with one greeting"

        response = requests.post(
            f"{BACKEND_URL}/api/conversation/message",
            json={"content": "Bonjour Benoît !"},
            timeout=60,
        )
        assert response.status_code == 200
        data = response.json()
        print(f"✅ Message status: {data['status']}")
        if data["reply"]:
            print(f"   Benoît: {data['reply']['content']}")
        else:
            print("   (No reply - check backend logs for Gemini errors)")
        assert data["state"]["is_thinking"] is False
        return True
    except Exception as e:
        print(f"❌ Free chat check failed: {e}")
        return False


def check_lesson_reset():
    """Start a lesson and make sure the chat transcript was dropped"""
    print("\n🔍 Checking lesson reset...")
    try:
        lessons = requests.get(f"{BACKEND_URL}/api/session/lessons", timeout=5).json()
        state = requests.post(
            f"{BACKEND_URL}/api/session/lesson",
            json={"lesson_id": lessons[0]["id"]},
            timeout=5,
        ).json()
        assert state["mode"] == "lesson"
        assert len(state["messages"]) == 1, "Lesson should start with one greeting"
        assert lessons[0]["title"] in state["messages"][0]["content"]
        print(f"✅ Lesson started: {state['active_lesson']['title']}")
        return True
    except Exception as e:
        print(f"❌ Lesson reset check failed: {e}")
        return False


def check_go_home():
    """Return home and make sure the transcript is empty"""
    print("\n🔍 Checking go home...")
    try:
        state = requests.post(f"{BACKEND_URL}/api/session/home", timeout=5).json()
        assert state["mode"] == "home"
        assert state["messages"] == []
        print("✅ Home: transcript cleared")
        return True
    except Exception as e:
        print(f"❌ Go home check failed: {e}")
        return False


def main():
    """Run all smoke checks"""
    print("=" * 60)
    print("BENOÎT SMOKE CHECK")
    print("=" * 60)

    checks = [
        ("Backend Health", check_health),
        ("Lesson Catalog", check_lessons),
        ("Free Chat", check_free_chat),
        ("Lesson Reset", check_lesson_reset),
        ("Go Home", check_go_home),
    ]

    results = []
    for name, check_func in checks:
        try:
            result = check_func()
            results.append((name, result))
        except Exception as e:
            print(f"\n❌ Check '{name}' crashed: {e}")
            results.append((name, False))

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)

    passed = sum(1 for _, result in results if result)
    total = len(results)

    for name, result in results:
        status = "✅ PASS" if result else "❌ FAIL"
        print(f"{status}: {name}")

    print(f"\nTotal: {passed}/{total} checks passed")

    if passed == total:
        print("\n🎉 All smoke checks passed!")
        return 0
    print("\n⚠️  Some smoke checks failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
