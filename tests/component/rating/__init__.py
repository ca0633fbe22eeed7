"""Rating service component tests"""
