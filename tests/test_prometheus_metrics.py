def test_metrics_endpoint_exposes_prometheus(app):
    with app.test_client() as client:
        client.get('/health')
        resp = client.get('/api/metrics')
        assert resp.status_code == 200
        body = resp.data.decode('utf-8')
        # Basic presence of our metric names
        assert 'bd_http_requests_total' in body
        assert 'bd_notifications_total' in body
        assert 'bd_design_reviews_total' in body
        assert 'bd_inventory_import_rows' in body
        # Check content type
        assert resp.mimetype.startswith('text/plain')
