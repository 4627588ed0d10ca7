"""Tests for health, models, metrics and fallback endpoints"""
import pytest


@pytest.mark.unit
class TestHealthEndpoint:
    """Test /health endpoint"""

    def test_health_check_success(self, app_client):
        """Test basic health check"""
        response = app_client.get('/health')

        assert response.status_code == 200
        assert response.json() == {
            'status': 'ok',
            'service': 'OpenAI to NVIDIA NIM Proxy',
            'reasoning_display': True,
            'thinking_mode': True,
        }

    def test_health_reflects_reasoning_settings(self, hidden_reasoning_client):
        """Test that the toggles come from configuration"""
        data = hidden_reasoning_client.get('/health').json()

        assert data['reasoning_display'] is False
        assert data['thinking_mode'] is False


@pytest.mark.unit
class TestModelsEndpoint:
    """Test /v1/models endpoint"""

    def test_list_models(self, app_client):
        """Test OpenAI-compatible model listing"""
        response = app_client.get('/v1/models')

        assert response.status_code == 200
        data = response.json()
        assert data['object'] == 'list'
        assert [m['id'] for m in data['data']] == ['gpt-4', 'deepseek-r1', 'meta/llama-3.1-8b-instruct']

    def test_model_entry_shape(self, app_client):
        """Test the fields of each model entry"""
        model = app_client.get('/v1/models').json()['data'][0]

        assert model['object'] == 'model'
        assert model['owned_by'] == 'nvidia-nim-proxy'
        assert isinstance(model['created'], int)


@pytest.mark.unit
class TestFallbackRoutes:
    """Test unknown endpoints and metrics exposure"""

    @pytest.mark.parametrize('method, path', [
        ('get', '/v1/embeddings'),
        ('post', '/v1/completions'),
        ('get', '/v1/chat/completions'),
    ])
    def test_unknown_endpoint(self, app_client, method, path):
        """Test that unsupported endpoints get an OpenAI-style 404"""
        response = getattr(app_client, method)(path)

        assert response.status_code == 404
        assert response.json() == {
            'error': {
                'message': f'Endpoint {path} not found',
                'type': 'invalid_request_error',
                'code': 404
            }
        }

    def test_metrics_endpoint(self, app_client):
        """Test Prometheus exposition after a request"""
        app_client.get('/health')

        response = app_client.get('/metrics')

        assert response.status_code == 200
        assert 'nim_proxy_requests_total' in response.text
