"""Image file codec and macro file management"""
