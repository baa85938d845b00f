"""URL configuration for the drive API."""

from django.urls import path

from server.apps.drive import views

app_name = 'drive'

urlpatterns = [
    # Folders
    path('folders', views.folders, name='folders'),
    path(
        'folders/<int:folder_id>',
        views.folder_detail,
        name='folder-detail',
    ),

    # Files
    path('files', views.files, name='files'),
    path('files/upload', views.upload, name='file-upload'),
    path('files/<int:file_id>', views.file_detail, name='file-detail'),
    path(
        'files/<int:file_id>/download',
        views.download,
        name='file-download',
    ),

    # Trash
    path('trash/empty', views.empty_trash, name='trash-empty'),

    # Shares: GET takes a token, DELETE a share ID
    path('shares', views.shares, name='shares'),
    path('shares/<str:key>', views.share_detail, name='share-detail'),

    # Storage usage
    path('user/storage', views.storage_info, name='storage'),
]
