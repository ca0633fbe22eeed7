"""Rating service data contracts"""
