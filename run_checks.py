from fastapi.testclient import TestClient
from hazardhub.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nSTORAGE HEALTH:')
try:
    resp = client.get('/health/db')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('Storage call raised exception:', e)

print('\nREASONS:')
print(client.get('/alerts/reasons').json())

print('\nSTATS:')
print(client.get('/admin/stats').json())
