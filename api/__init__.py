"""HTTP API blueprints for the dose engine"""
