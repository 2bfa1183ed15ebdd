print("Checking imports...")
try:
    import groq
    print("Groq SDK: OK")
except ImportError as e:
    print(f"Groq SDK Error: {e}")

try:
    import google.generativeai
    print("Gemini: OK")
except ImportError as e:
    print(f"Gemini Error: {e}")

try:
    import pymongo
    print(f"PyMongo {pymongo.version}: OK")
except ImportError as e:
    print(f"PyMongo Error: {e}")

try:
    import bcrypt
    print("bcrypt: OK")
except ImportError as e:
    print(f"bcrypt Error: {e}")

try:
    from roadmapper.main import app
    print("App Import: OK")
except Exception as e:
    print(f"App Import Error: {e}")

print("Done.")
