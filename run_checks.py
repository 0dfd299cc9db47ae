from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nENGINE HEALTH:')
try:
    resp = client.get('/health/engine')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('Engine call raised exception:', e)

print('\nDISPATCH DASHBOARD:')
resp = client.get('/reports', headers={'X-Account-Id': 'USR-DISPATCH'})
print(resp.status_code, resp.json())
